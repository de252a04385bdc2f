"""File-transfer frame builder and parser.

Between ``M28`` and ``M29`` the file is streamed as fixed-size binary frames::

    +-------------+----------+----------+----------+---------------------+
    | Prefix      | Sequence | Length   | CRC-32   | Payload             |
    | 5A 5A EF BF | u32 BE   | u32 BE   | u32 BE   | PACKET_SIZE bytes   |
    +-------------+----------+----------+----------+---------------------+

- Sequence: frame index, starting at 0
- Length: number of meaningful payload bytes (less than PACKET_SIZE only
  on the last frame)
- CRC-32: checksum of the meaningful payload bytes, never the padding
- Payload: file data, zero-padded to PACKET_SIZE
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from ..utils.crc import crc32
from .codec import U32_SIZE, pack_u32, unpack_u32

FRAME_PREFIX = b"\x5A\x5A\xEF\xBF"
PACKET_SIZE = 4096
HEADER_SIZE = len(FRAME_PREFIX) + 3 * U32_SIZE  # 16


@dataclass
class FileFrame:
    """One file-transfer frame, payload without padding."""

    sequence: int
    length: int
    crc: int
    payload: bytes

    def to_bytes(self, packet_size: int = PACKET_SIZE) -> bytes:
        """Serialize the frame, zero-padding the payload to *packet_size*."""
        return (
            FRAME_PREFIX
            + pack_u32(self.sequence)
            + pack_u32(self.length)
            + pack_u32(self.crc)
            + self.payload.ljust(packet_size, b"\x00")
        )

    def __repr__(self) -> str:
        return (
            f"FileFrame(sequence={self.sequence}, length={self.length}, "
            f"crc=0x{self.crc:08X})"
        )


def _check_packet_size(packet_size: int) -> None:
    if packet_size <= 0:
        raise ValueError(f"Packet size must be positive, got {packet_size}")


def make_frame(sequence: int, chunk: bytes, packet_size: int = PACKET_SIZE) -> FileFrame:
    """Build a :class:`FileFrame` for one chunk of file data."""
    _check_packet_size(packet_size)
    if len(chunk) > packet_size:
        raise ValueError(
            f"Chunk of {len(chunk)} bytes exceeds packet size {packet_size}"
        )
    return FileFrame(
        sequence=sequence,
        length=len(chunk),
        crc=crc32(chunk),
        payload=bytes(chunk),
    )


def build_frame(sequence: int, chunk: bytes, packet_size: int = PACKET_SIZE) -> bytes:
    """Build the wire bytes for one chunk of file data."""
    return make_frame(sequence, chunk, packet_size).to_bytes(packet_size)


def iter_frames(data: bytes, packet_size: int = PACKET_SIZE) -> Iterator[FileFrame]:
    """Split *data* into frames, lazily and in sequence order.

    A buffer whose length is an exact multiple of *packet_size* ends with a
    full frame; no empty trailing frame is produced. Empty input produces
    no frames.
    """
    _check_packet_size(packet_size)
    view = memoryview(data)
    for sequence, offset in enumerate(range(0, len(view), packet_size)):
        yield make_frame(sequence, view[offset : offset + packet_size], packet_size)


def frame_count(byte_count: int, packet_size: int = PACKET_SIZE) -> int:
    """Number of frames needed to send *byte_count* bytes."""
    _check_packet_size(packet_size)
    return -(-byte_count // packet_size)


def parse_frame(data: bytes, packet_size: int = PACKET_SIZE) -> FileFrame | None:
    """Parse one frame's wire bytes.

    Returns:
        A ``FileFrame`` with the padding stripped, or ``None`` if the frame
        is the wrong size, has a bad prefix or length, or fails its CRC.
    """
    if len(data) != HEADER_SIZE + packet_size:
        return None
    if data[: len(FRAME_PREFIX)] != FRAME_PREFIX:
        return None

    offset = len(FRAME_PREFIX)
    sequence = unpack_u32(data, offset)
    length = unpack_u32(data, offset + U32_SIZE)
    expected_crc = unpack_u32(data, offset + 2 * U32_SIZE)
    if length > packet_size:
        return None

    payload = bytes(data[HEADER_SIZE : HEADER_SIZE + length])
    if crc32(payload) != expected_crc:
        return None

    return FileFrame(sequence=sequence, length=length, crc=expected_crc, payload=payload)


def reassemble(frames: Iterable[FileFrame]) -> bytes:
    """Concatenate frame payloads in sequence order.

    Raises:
        ValueError: If sequence numbers have gaps or repeats.
    """
    ordered = sorted(frames, key=lambda f: f.sequence)
    for expected, frame in enumerate(ordered):
        if frame.sequence != expected:
            raise ValueError(
                f"Frame sequence gap: expected {expected}, got {frame.sequence}"
            )
    return b"".join(frame.payload for frame in ordered)
