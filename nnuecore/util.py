"""General helpers: a fixed-size hash table, a 64-bit PRNG and timing."""

from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_MULTIPLIER = 2685821657736338717


class HashTable(Generic[T]):
    """A fixed-size table indexed by the low bits of a key.

    Every slot holds an entry built once by ``factory``; keys that share
    their low bits share the same entry.
    """

    def __init__(self, factory: Callable[[], T], size: int) -> None:
        if size <= 0 or size & (size - 1):
            raise ValueError("hash table size must be a positive power of two")
        self._table = [factory() for _ in range(size)]

    def __getitem__(self, key: int) -> T:
        return self._table[(key & _MASK32) & (len(self._table) - 1)]

    def __len__(self) -> int:
        return len(self._table)


class PRNG:
    """xorshift64* pseudo-random number generator with a 64-bit state."""

    def __init__(self, seed: int) -> None:
        if not seed & _MASK64:
            raise ValueError("seed must be non-zero")
        self._state = seed & _MASK64

    def rand64(self) -> int:
        """Return the next 64-bit output."""
        s = self._state
        s ^= s >> 12
        s ^= (s << 25) & _MASK64
        s ^= s >> 27
        self._state = s
        return (s * _MULTIPLIER) & _MASK64

    def rand(self, bits: int = 64) -> int:
        """Return the next output truncated to ``bits`` bits."""
        _check_bits(bits)
        return self.rand64() & ((1 << bits) - 1)

    def sparse_rand(self, bits: int = 64) -> int:
        """Return an output with about one bit in eight set."""
        _check_bits(bits)
        value = self.rand64() & self.rand64() & self.rand64()
        return value & ((1 << bits) - 1)


def _check_bits(bits: int) -> None:
    if not 1 <= bits <= 64:
        raise ValueError("bits must be between 1 and 64")


def mul_hi64(a: int, b: int) -> int:
    """Return the high 64 bits of the 128-bit product of two 64-bit values."""
    for value in (a, b):
        if not 0 <= value <= _MASK64:
            raise ValueError("operands must be unsigned 64-bit integers")
    return (a * b) >> 64


def now() -> int:
    """Return a monotonic time point in milliseconds."""
    return time.monotonic_ns() // 1_000_000