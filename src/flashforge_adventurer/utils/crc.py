"""CRC-32 used to checksum file-transfer frames.

This is the reflected 0xEDB88320 polynomial (Ethernet, zip, PNG), so the
``zlib`` implementation produces the values the printer expects.
"""

from __future__ import annotations

import zlib


def crc32(data: bytes, value: int = 0) -> int:
    """Compute CRC-32 over *data* as an unsigned 32-bit integer.

    Args:
        data: Bytes to checksum.
        value: Running CRC from a previous call, for incremental use.
    """
    return zlib.crc32(data, value) & 0xFFFFFFFF
