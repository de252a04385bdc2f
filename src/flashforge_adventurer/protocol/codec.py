"""Big-endian integer helpers for the binary file-transfer header."""

from __future__ import annotations

U32_SIZE = 4
U32_MAX = 0xFFFFFFFF


def pack_u32(value: int) -> bytes:
    """Encode *value* as a 4-byte big-endian unsigned integer."""
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"u32 value out of range: {value}")
    return value.to_bytes(U32_SIZE, "big")


def unpack_u32(data: bytes, offset: int = 0) -> int:
    """Decode a 4-byte big-endian unsigned integer at *offset*."""
    chunk = data[offset : offset + U32_SIZE]
    if len(chunk) != U32_SIZE:
        raise ValueError(
            f"Need {U32_SIZE} bytes at offset {offset}, got {len(chunk)}"
        )
    return int.from_bytes(chunk, "big")
