"""Constants and binary readers shared by the network components."""

from __future__ import annotations

from typing import BinaryIO

import numpy as np

VERSION = 0x7AF32F16
OUTPUT_SCALE = 16
WEIGHT_SCALE_BITS = 6
CACHE_LINE_SIZE = 64
MAX_SIMD_WIDTH = 32

TRANSFORMED_FEATURE_DTYPE = np.uint8


class NNUEFormatError(ValueError):
    """Raised when network data is truncated or does not match the architecture."""


def ceil_to_multiple(n: int, base: int) -> int:
    """Round ``n`` up to a multiple of ``base``."""
    if base <= 0:
        raise ValueError("base must be positive")
    return (n + base - 1) // base * base


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if data is None or len(data) != size:
        raise NNUEFormatError("unexpected end of network data")
    return data


def read_little_endian(stream: BinaryIO, size: int = 4, signed: bool = False) -> int:
    """Read an integer of ``size`` bytes stored in little-endian order."""
    if size <= 0:
        raise ValueError("size must be positive")
    return int.from_bytes(_read_exact(stream, size), "little", signed=signed)


def read_array(stream: BinaryIO, dtype, count: int) -> np.ndarray:
    """Read ``count`` little-endian values of ``dtype`` into a new array."""
    if count < 0:
        raise ValueError("count must not be negative")
    native = np.dtype(dtype)
    wire = native.newbyteorder("<")
    data = _read_exact(stream, count * native.itemsize)
    return np.frombuffer(data, dtype=wire, count=count).astype(native)