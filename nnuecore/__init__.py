"""NNUE evaluation for chess: HalfKP features, accumulators, network layers, file loading and engine utilities."""

__version__ = "0.1.0"