"""The complete evaluation network: file loading and forward propagation."""

from __future__ import annotations

from typing import BinaryIO, Sequence, Union

import numpy as np

from .affine import AffineTransform
from .common import OUTPUT_SCALE, VERSION, NNUEFormatError, read_array, read_little_endian
from .features import DIMENSIONS
from .layers import ClippedReLU, InputSlice, Layer
from .transformer import DEFAULT_HALF_DIMENSIONS, Accumulator, FeatureTransformer

_MASK32 = 0xFFFFFFFF
DEFAULT_HIDDEN = (32, 32)


def _hidden_sizes(hidden: Union[int, Sequence[int]]) -> tuple[int, ...]:
    sizes = (hidden, hidden) if isinstance(hidden, int) else tuple(hidden)
    if any(size <= 0 for size in sizes):
        raise ValueError("hidden layer sizes must be positive")
    return sizes


def build_network(
    half_dimensions: int = DEFAULT_HALF_DIMENSIONS,
    hidden: Union[int, Sequence[int]] = DEFAULT_HIDDEN,
) -> AffineTransform:
    """Build the layer stack on top of the transformed features; return its output layer."""
    layer: Layer = InputSlice(half_dimensions * 2)
    for size in _hidden_sizes(hidden):
        layer = ClippedReLU(AffineTransform(layer, size))
    return AffineTransform(layer, 1)


def read_header(stream: BinaryIO) -> tuple[int, str]:
    """Read the file header; return the structure hash and architecture string."""
    version = read_little_endian(stream, 4)
    hash_value = read_little_endian(stream, 4)
    size = read_little_endian(stream, 4)
    if version != VERSION:
        raise NNUEFormatError(f"unsupported network version 0x{version:08X}")
    architecture = read_array(stream, np.uint8, size).tobytes()
    return hash_value, architecture.decode("utf-8", errors="replace")


def _truncating_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


class Evaluator:
    """Feature transformer plus network, loaded from one parameter file."""

    def __init__(
        self,
        half_dimensions: int = DEFAULT_HALF_DIMENSIONS,
        input_dimensions: int = DIMENSIONS,
        hidden: Union[int, Sequence[int]] = DEFAULT_HIDDEN,
    ) -> None:
        self.half_dimensions = half_dimensions
        self.input_dimensions = input_dimensions
        self.hidden = _hidden_sizes(hidden)
        self.file_name = ""
        self._initialize()

    def _initialize(self) -> None:
        self.transformer = FeatureTransformer(self.half_dimensions, self.input_dimensions)
        self.network = build_network(self.half_dimensions, self.hidden)

    def hash_value(self) -> int:
        """Return the structure hash of the whole evaluation function."""
        return (self.transformer.hash_value() ^ self.network.hash_value()) & _MASK32

    @staticmethod
    def _read_block(stream: BinaryIO, component) -> None:
        header = read_little_endian(stream, 4)
        if header != component.hash_value():
            raise NNUEFormatError("component hash does not match the architecture")
        component.read_parameters(stream)

    def read_parameters(self, stream: BinaryIO) -> None:
        """Read the header and all parameters; the stream must end right after them."""
        hash_value, _ = read_header(stream)
        if hash_value != self.hash_value():
            raise NNUEFormatError("network hash does not match the architecture")
        self._read_block(stream, self.transformer)
        self._read_block(stream, self.network)
        if stream.read(1):
            raise NNUEFormatError("unexpected data after the network parameters")

    def load_eval(self, name: str, stream: BinaryIO) -> None:
        """Reset all parameters and load them from ``stream``, remembering ``name``."""
        self._initialize()
        self.file_name = name
        self.read_parameters(stream)

    def evaluate(self, accumulator: Accumulator, side_to_move: int) -> int:
        """Return the network's value for a computed accumulator."""
        features = self.transformer.transform(accumulator, side_to_move)
        output = self.network.propagate(features)
        return _truncating_div(int(output[0]), OUTPUT_SCALE)