"""Input slice and clipped ReLU layers of the evaluation network."""

from __future__ import annotations

from typing import BinaryIO, Protocol

import numpy as np

from .common import MAX_SIMD_WIDTH, WEIGHT_SCALE_BITS

_MASK32 = 0xFFFFFFFF


class Layer(Protocol):
    """The interface every network layer provides."""

    output_dimensions: int

    def hash_value(self) -> int: ...

    def read_parameters(self, stream: BinaryIO) -> None: ...

    def propagate(self, features: np.ndarray) -> np.ndarray: ...


class InputSlice:
    """Input layer: a window of the transformed features."""

    def __init__(self, output_dimensions: int, offset: int = 0) -> None:
        if offset % MAX_SIMD_WIDTH:
            raise ValueError(f"offset must be a multiple of {MAX_SIMD_WIDTH}")
        if output_dimensions <= 0:
            raise ValueError("output_dimensions must be positive")
        self.output_dimensions = output_dimensions
        self.offset = offset

    def hash_value(self) -> int:
        """Return the structure hash stored in network files."""
        return (0xEC42E90D ^ (self.output_dimensions ^ (self.offset << 10))) & _MASK32

    def read_parameters(self, stream: BinaryIO) -> None:
        """Consume nothing: the input layer has no parameters.

        The stream must still be open, since the layers after this one
        read their parameters from it.
        """
        if getattr(stream, "closed", False):
            raise ValueError("cannot read parameters from a closed stream")

    def propagate(self, features: np.ndarray) -> np.ndarray:
        """Return the slice of ``features`` this layer covers."""
        features = np.asarray(features, dtype=np.uint8)
        end = self.offset + self.output_dimensions
        if features.shape[0] < end:
            raise ValueError("feature vector is shorter than the input slice")
        return features[self.offset:end]


class ClippedReLU:
    """Scales int32 inputs down and clamps them to the range 0..127."""

    def __init__(self, previous: Layer) -> None:
        self.previous = previous
        self.input_dimensions = previous.output_dimensions
        self.output_dimensions = self.input_dimensions

    def hash_value(self) -> int:
        """Return the structure hash stored in network files."""
        return (0x538D24C7 + self.previous.hash_value()) & _MASK32

    def read_parameters(self, stream: BinaryIO) -> None:
        """Read the parameters of the preceding layers."""
        self.previous.read_parameters(stream)

    def propagate(self, features: np.ndarray) -> np.ndarray:
        """Run the preceding layers and apply the clipped activation."""
        values = np.asarray(self.previous.propagate(features), dtype=np.int32)
        shifted = np.right_shift(values, WEIGHT_SCALE_BITS)
        return np.clip(shifted, 0, 127).astype(np.uint8)