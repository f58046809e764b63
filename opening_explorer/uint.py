"""Variable-length unsigned integers: 7 bits per byte, least significant group first."""

from __future__ import annotations

from typing import BinaryIO

_U64_MAX = (1 << 64) - 1


def read_uint(reader: BinaryIO) -> int:
    """Read one variable-length unsigned integer from a binary stream."""
    n = 0
    shift = 0
    while True:
        chunk = reader.read(1)
        if not chunk:
            raise EOFError("unexpected end of input while reading uint")
        byte = chunk[0]
        n |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return n
        shift += 7


def write_uint(buf: bytearray, n: int) -> None:
    """Append ``n`` to ``buf`` as a variable-length unsigned integer."""
    if not 0 <= n <= _U64_MAX:
        raise ValueError(f"uint out of range: {n}")
    while n > 127:
        buf.append((n & 127) | 128)
        n >>= 7
    buf.append(n)