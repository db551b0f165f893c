import io

import numpy as np
import pytest

from nnuecore.layers import ClippedReLU, InputSlice


class _StubLayer:
    """Stand-in layer that returns fixed int32 outputs."""

    def __init__(self, outputs, hash_value=0x1234):
        self.outputs = np.asarray(outputs, dtype=np.int32)
        self.output_dimensions = len(self.outputs)
        self._hash = hash_value
        self.streams = []

    def hash_value(self):
        return self._hash

    def read_parameters(self, stream):
        self.streams.append(stream)

    def propagate(self, features):
        return self.outputs


def test_input_slice_hash_depends_on_dimensions():
    diff = InputSlice(512).hash_value() ^ InputSlice(256).hash_value()
    assert diff == 512 ^ 256


def test_input_slice_hash_depends_on_offset():
    diff = InputSlice(64, 32).hash_value() ^ InputSlice(64, 0).hash_value()
    assert diff == 32 << 10


def test_input_slice_rejects_unaligned_offset():
    with pytest.raises(ValueError):
        InputSlice(64, 16)


def test_input_slice_propagate_returns_window():
    features = np.arange(128, dtype=np.uint8)
    out = InputSlice(32, 64).propagate(features)
    assert out.tolist() == list(range(64, 96))


def test_input_slice_short_input():
    with pytest.raises(ValueError):
        InputSlice(64, 32).propagate(np.zeros(80, dtype=np.uint8))


def test_input_slice_read_parameters_consumes_nothing():
    stream = io.BytesIO(b"abc")
    InputSlice(32).read_parameters(stream)
    assert stream.read() == b"abc"


def test_clipped_relu_hash_adds_constant():
    prev = _StubLayer([0], hash_value=0xFFFFFFFF)
    layer = ClippedReLU(prev)
    assert (layer.hash_value() - prev.hash_value()) % 2**32 == 0x538D24C7
    assert 0 <= layer.hash_value() < 2**32


def test_clipped_relu_dimensions_follow_previous():
    layer = ClippedReLU(_StubLayer(range(32)))
    assert layer.output_dimensions == layer.input_dimensions == 32


def test_clipped_relu_clamps_extremes():
    layer = ClippedReLU(_StubLayer([-(2**31), -1, 2**31 - 1, 127 << 6]))
    assert layer.propagate(None).tolist() == [0, 0, 127, 127]


def test_clipped_relu_scaling_invariant():
    values = np.arange(-500, 9000, 37, dtype=np.int32)
    out = ClippedReLU(_StubLayer(values)).propagate(None)
    assert out.dtype == np.uint8
    for x, y in zip(values.tolist(), out.tolist()):
        assert 0 <= y <= 127
        if 0 <= x < (128 << 6):
            assert y * 64 <= x < (y + 1) * 64
        elif x < 0:
            assert y == 0


def test_clipped_relu_chains_with_input_slice():
    features = np.full(64, 100, dtype=np.uint8)
    layer = ClippedReLU(ClippedReLU(_StubLayer([64 * 5])))
    assert layer.propagate(features).tolist() == [0]


def test_clipped_relu_read_parameters_delegates():
    prev = _StubLayer([1, 2])
    stream = io.BytesIO(b"")
    ClippedReLU(prev).read_parameters(stream)
    assert prev.streams == [stream]