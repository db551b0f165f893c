# nnuecore

`nnuecore` evaluates chess positions with an NNUE network that uses the
HalfKP feature set. It reads network files in their binary format. It keeps
accumulators up to date either by full refresh or by incremental update, and
returns the network's output in internal units. numpy does the arithmetic.

## Installation

```
pip install nnuecore
```

To run the test suite:

```
pip install "nnuecore[test]"
pytest
```

## Modules

- `nnuecore.features` handles HalfKP feature indexing.
  - `orient` rotates a square by 180 degrees for the black perspective.
  - `make_index`, `active_indices` and `changed_indices` turn piece
    placements and moved pieces (`DirtyPiece`) into feature indices. Kings
    are never features.
  - `update_cost`, `refresh_cost` and `requires_refresh` decide whether an
    incremental update is possible.
  - The module also defines colour and piece constants: `WHITE`, `BLACK`,
    `W_PAWN` … `W_KING` and `B_PAWN` … `B_KING`.
- `nnuecore.transformer` provides `FeatureTransformer`, `Accumulator` and
  `AccumulatorState`.
  - `refresh` recomputes one perspective of an accumulator from its active
    features.
  - `update` derives an accumulator from a computed one by taking away
    removed features and adding new ones.
  - `transform` clips both perspectives to 0..127 and returns them as a
    `uint8` vector, side to move first.
- `nnuecore.layers` and `nnuecore.affine` hold the layers that follow the
  transformer: `InputSlice`, `ClippedReLU` and `AffineTransform`. Each layer
  has `hash_value`, `read_parameters` and `propagate`.
- `nnuecore.evaluate` provides:
  - `build_network`, which builds the layer stack. The default is two hidden
    layers of 32 units and a single output.
  - `read_header`, which reads a file header.
  - `Evaluator`, which combines a feature transformer with the network,
    loads a whole file and evaluates an accumulator.
- `nnuecore.common` provides `read_little_endian`, `read_array`,
  `ceil_to_multiple`, the file format constants and the `NNUEFormatError`
  exception.
- `nnuecore.util` provides:
  - `HashTable`, a fixed-size table indexed by the low bits of a key.
  - `PRNG`, an xorshift64* generator.
  - `mul_hi64` and `now`, a monotonic time in milliseconds.
- `nnuecore.misc` provides:
  - `engine_info` and `compiler_info`.
  - The debug counters `DebugStats`, `dbg_hit_on`, `dbg_mean_of` and
    `dbg_print`.
  - `start_logger`, which mirrors standard input and output into a file.
    Call it with an empty name to stop.
  - `CommandLine.from_argv`, which works out the binary and working
    directories.

## Usage

```python
from nnuecore.evaluate import Evaluator
from nnuecore.features import BLACK, WHITE, B_KING, W_KING, W_PAWN, active_indices
from nnuecore.transformer import Accumulator

evaluator = Evaluator()
with open("network.nnue", "rb") as stream:
    evaluator.load_eval("network.nnue", stream)

# Squares are 0 (a1) to 63 (h8); pieces map square -> piece.
pieces = {4: W_KING, 60: B_KING, 12: W_PAWN}

accumulator = Accumulator()
evaluator.transformer.refresh(accumulator, WHITE, active_indices(WHITE, 4, pieces))
evaluator.transformer.refresh(accumulator, BLACK, active_indices(BLACK, 60, pieces))

value = evaluator.evaluate(accumulator, WHITE)
```

`load_eval` raises `NNUEFormatError` in any of these cases:

- the file has the wrong version;
- the overall hash or a component hash does not match the architecture;
- the file is cut short;
- there is data after the last parameter.

`evaluate` raises `ValueError` if either perspective of the accumulator has
not been computed.

### Incremental updates

After a move, describe the changed pieces with a `DirtyPiece`. Each change is
a `(piece, from_square, to_square)` triple; `None` stands for a piece that
appears or disappears.

1. Call `requires_refresh` for each perspective. If the perspective's own
   king moved, that perspective needs a full `refresh`.
2. Otherwise, get the removed and added indices from `changed_indices` and
   pass them to `FeatureTransformer.update`. This updates the accumulator
   without recomputing it.

## What this package does not do

It has no board representation, no move generation, no search and no
command-line or protocol front end. The caller supplies piece placements,
king squares and the pieces a move changed, and keeps track of which
accumulator belongs to which position.