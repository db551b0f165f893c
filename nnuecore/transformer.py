"""Feature transformer: turns active input features into the network's first layer."""

from __future__ import annotations

import enum
from typing import BinaryIO, Iterable, Sequence

import numpy as np

from .common import TRANSFORMED_FEATURE_DTYPE, read_array

HALF_KP_HASH = 0x5D69D5B8
DEFAULT_HALF_DIMENSIONS = 256
DEFAULT_INPUT_DIMENSIONS = 64 * (10 * 64 + 1)

_MASK32 = 0xFFFFFFFF


class AccumulatorState(enum.Enum):
    """Whether an accumulator half holds up-to-date values."""

    EMPTY = 0
    COMPUTED = 1
    INIT = 2


class Accumulator:
    """Affine transformation of the input features, one half per perspective."""

    def __init__(self, half_dimensions: int = DEFAULT_HALF_DIMENSIONS) -> None:
        if half_dimensions <= 0:
            raise ValueError("half_dimensions must be positive")
        self.accumulation = np.zeros((2, half_dimensions), dtype=np.int16)
        self.state = [AccumulatorState.EMPTY, AccumulatorState.EMPTY]


def _check_perspective(perspective: int) -> int:
    if perspective not in (0, 1):
        raise ValueError("perspective must be 0 (white) or 1 (black)")
    return int(perspective)


class FeatureTransformer:
    """Converts sparse input features into clipped uint8 activations."""

    def __init__(
        self,
        half_dimensions: int = DEFAULT_HALF_DIMENSIONS,
        input_dimensions: int = DEFAULT_INPUT_DIMENSIONS,
    ) -> None:
        if half_dimensions <= 0 or input_dimensions <= 0:
            raise ValueError("dimensions must be positive")
        self.half_dimensions = half_dimensions
        self.input_dimensions = input_dimensions
        self.output_dimensions = half_dimensions * 2
        self.biases = np.zeros(half_dimensions, dtype=np.int16)
        self.weights = np.zeros((input_dimensions, half_dimensions), dtype=np.int16)

    def hash_value(self) -> int:
        """Return the structure hash stored in network files."""
        return (HALF_KP_HASH ^ self.output_dimensions) & _MASK32

    def read_parameters(self, stream: BinaryIO) -> None:
        """Read the int16 biases followed by the int16 weights."""
        biases = read_array(stream, np.int16, self.half_dimensions)
        weights = read_array(
            stream, np.int16, self.half_dimensions * self.input_dimensions
        )
        self.biases = biases
        self.weights = weights.reshape(self.input_dimensions, self.half_dimensions)

    def _columns_sum(self, indices: Iterable[int]) -> np.ndarray:
        idx = np.fromiter((int(i) for i in indices), dtype=np.int64)
        if idx.size and (idx.min() < 0 or idx.max() >= self.input_dimensions):
            raise ValueError("feature index out of range")
        if not idx.size:
            return np.zeros(self.half_dimensions, dtype=np.int64)
        return self.weights[idx].astype(np.int64).sum(axis=0)

    def _check_accumulator(self, accumulator: Accumulator) -> None:
        if accumulator.accumulation.shape != (2, self.half_dimensions):
            raise ValueError("accumulator size does not match the transformer")

    def refresh(
        self, accumulator: Accumulator, perspective: int, active: Iterable[int]
    ) -> None:
        """Recompute one half of ``accumulator`` from the active features."""
        p = _check_perspective(perspective)
        self._check_accumulator(accumulator)
        total = self.biases.astype(np.int64) + self._columns_sum(active)
        accumulator.accumulation[p] = total.astype(np.int16)
        accumulator.state[p] = AccumulatorState.COMPUTED

    def update(
        self,
        source: Accumulator,
        target: Accumulator,
        perspective: int,
        removed: Iterable[int],
        added: Iterable[int],
    ) -> None:
        """Derive ``target`` from a computed ``source`` by removing and adding features."""
        p = _check_perspective(perspective)
        self._check_accumulator(source)
        self._check_accumulator(target)
        if source.state[p] is not AccumulatorState.COMPUTED:
            raise ValueError("source accumulator is not computed for this perspective")
        total = (
            source.accumulation[p].astype(np.int64)
            - self._columns_sum(removed)
            + self._columns_sum(added)
        )
        target.accumulation[p] = total.astype(np.int16)
        target.state[p] = AccumulatorState.COMPUTED

    def transform(self, accumulator: Accumulator, side_to_move: int) -> np.ndarray:
        """Return the clipped activations, side to move first."""
        us = _check_perspective(side_to_move)
        self._check_accumulator(accumulator)
        perspectives: Sequence[int] = (us, 1 - us)
        for p in perspectives:
            if accumulator.state[p] is not AccumulatorState.COMPUTED:
                raise ValueError("accumulator is not computed for both perspectives")
        halves = [
            np.clip(accumulator.accumulation[p].astype(np.int32), 0, 127)
            for p in perspectives
        ]
        return np.concatenate(halves).astype(TRANSFORMED_FEATURE_DTYPE)