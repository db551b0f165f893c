"""Fully connected layer of the evaluation network."""

from __future__ import annotations

from typing import BinaryIO

import numpy as np

from .common import CACHE_LINE_SIZE, MAX_SIMD_WIDTH, ceil_to_multiple, read_array
from .layers import Layer

_MASK32 = 0xFFFFFFFF


class AffineTransform:
    """Affine layer: int8 weights and int32 biases applied to uint8 inputs.

    Each row of weights is padded to a multiple of the widest SIMD width in
    the network file; the padding columns are read but never used.
    """

    def __init__(self, previous: Layer, output_dimensions: int) -> None:
        if output_dimensions <= 0:
            raise ValueError("output_dimensions must be positive")
        self.previous = previous
        self.input_dimensions = previous.output_dimensions
        self.output_dimensions = output_dimensions
        self.padded_input_dimensions = ceil_to_multiple(
            self.input_dimensions, MAX_SIMD_WIDTH
        )
        self.self_buffer_size = ceil_to_multiple(
            output_dimensions * np.dtype(np.int32).itemsize, CACHE_LINE_SIZE
        )
        self.biases = np.zeros(output_dimensions, dtype=np.int32)
        self.weights = np.zeros(
            (output_dimensions, self.padded_input_dimensions), dtype=np.int8
        )

    def hash_value(self) -> int:
        """Return the structure hash stored in network files."""
        previous = self.previous.hash_value() & _MASK32
        value = (0xCC03DAE4 + self.output_dimensions) & _MASK32
        value ^= previous >> 1
        value ^= (previous << 31) & _MASK32
        return value & _MASK32

    def read_parameters(self, stream: BinaryIO) -> None:
        """Read the preceding layers' parameters, then this layer's biases and weights."""
        self.previous.read_parameters(stream)
        biases = read_array(stream, np.int32, self.output_dimensions)
        weights = read_array(
            stream, np.int8, self.output_dimensions * self.padded_input_dimensions
        )
        self.biases = biases
        self.weights = weights.reshape(
            self.output_dimensions, self.padded_input_dimensions
        )

    def propagate(self, features: np.ndarray) -> np.ndarray:
        """Run the preceding layers and apply the affine transformation."""
        values = np.asarray(self.previous.propagate(features))
        if values.shape[0] < self.input_dimensions:
            raise ValueError("input vector is shorter than the layer's input")
        inputs = values[: self.input_dimensions].astype(np.int64)
        used = self.weights[:, : self.input_dimensions].astype(np.int64)
        sums = used @ inputs + self.biases.astype(np.int64)
        return sums.astype(np.int32)