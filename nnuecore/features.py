"""HalfKP input features: the own king's square combined with every other piece."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union

WHITE = 0
BLACK = 1

SQUARE_NB = 64

NO_PIECE = 0
W_PAWN, W_KNIGHT, W_BISHOP, W_ROOK, W_QUEEN, W_KING = 1, 2, 3, 4, 5, 6
B_PAWN, B_KNIGHT, B_BISHOP, B_ROOK, B_QUEEN, B_KING = 9, 10, 11, 12, 13, 14
PIECE_NB = 16
KING = 6

NAME = "HalfKP(Friend)"
HASH_VALUE = 0x5D69D5B8

PS_NONE = 0
PS_W_PAWN = 1
PS_B_PAWN = 1 * SQUARE_NB + 1
PS_W_KNIGHT = 2 * SQUARE_NB + 1
PS_B_KNIGHT = 3 * SQUARE_NB + 1
PS_W_BISHOP = 4 * SQUARE_NB + 1
PS_B_BISHOP = 5 * SQUARE_NB + 1
PS_W_ROOK = 6 * SQUARE_NB + 1
PS_B_ROOK = 7 * SQUARE_NB + 1
PS_W_QUEEN = 8 * SQUARE_NB + 1
PS_B_QUEEN = 9 * SQUARE_NB + 1
PS_NB = 10 * SQUARE_NB + 1

DIMENSIONS = SQUARE_NB * PS_NB
MAX_ACTIVE_DIMENSIONS = 30

# Indexed by [perspective][piece]; "W" means the perspective's own pieces.
_PIECE_SQUARE_INDEX = (
    (
        PS_NONE, PS_W_PAWN, PS_W_KNIGHT, PS_W_BISHOP, PS_W_ROOK, PS_W_QUEEN, PS_NONE, PS_NONE,
        PS_NONE, PS_B_PAWN, PS_B_KNIGHT, PS_B_BISHOP, PS_B_ROOK, PS_B_QUEEN, PS_NONE, PS_NONE,
    ),
    (
        PS_NONE, PS_B_PAWN, PS_B_KNIGHT, PS_B_BISHOP, PS_B_ROOK, PS_B_QUEEN, PS_NONE, PS_NONE,
        PS_NONE, PS_W_PAWN, PS_W_KNIGHT, PS_W_BISHOP, PS_W_ROOK, PS_W_QUEEN, PS_NONE, PS_NONE,
    ),
)

Change = Tuple[int, Optional[int], Optional[int]]


def _check_perspective(perspective: int) -> int:
    if perspective not in (WHITE, BLACK):
        raise ValueError("perspective must be 0 (white) or 1 (black)")
    return int(perspective)


def _check_square(square: int) -> int:
    if not 0 <= square < SQUARE_NB:
        raise ValueError(f"square out of range: {square}")
    return int(square)


def _check_piece(piece: int) -> int:
    if not 0 <= piece < PIECE_NB:
        raise ValueError(f"piece out of range: {piece}")
    return int(piece)


def _piece_type(piece: int) -> int:
    return piece & 7


def _make_piece(color: int, piece_type: int) -> int:
    return (color << 3) + piece_type


@dataclass(frozen=True)
class DirtyPiece:
    """Pieces changed by one move, as (piece, from square, to square) triples.

    A from square of None means the piece appeared; a to square of None
    means it was removed.
    """

    changes: Tuple[Change, ...] = ()

    def __post_init__(self) -> None:
        changes = tuple(tuple(change) for change in self.changes)
        if len(changes) > 3:
            raise ValueError("a move changes at most three pieces")
        for change in changes:
            if len(change) != 3:
                raise ValueError("each change is (piece, from, to)")
            piece, from_sq, to_sq = change
            _check_piece(piece)
            for square in (from_sq, to_sq):
                if square is not None:
                    _check_square(square)
        object.__setattr__(self, "changes", changes)

    @property
    def dirty_num(self) -> int:
        """Number of changed pieces."""
        return len(self.changes)


def orient(perspective: int, square: int) -> int:
    """Rotate ``square`` by 180 degrees for the black perspective."""
    p = _check_perspective(perspective)
    return _check_square(square) ^ (63 if p else 0)


def make_index(perspective: int, square: int, piece: int, king_square: int) -> int:
    """Return the feature index for ``piece`` on ``square``.

    ``king_square`` is the perspective's king square, already oriented.
    """
    p = _check_perspective(perspective)
    return (
        orient(p, square)
        + _PIECE_SQUARE_INDEX[p][_check_piece(piece)]
        + PS_NB * _check_square(king_square)
    )


def active_indices(
    perspective: int,
    king_square: int,
    pieces: Union[Mapping[int, int], Iterable[Tuple[int, int]]],
) -> list[int]:
    """Return the active feature indices, in ascending square order.

    ``pieces`` maps squares to pieces; kings are ignored.
    """
    p = _check_perspective(perspective)
    ksq = orient(p, king_square)
    items = pieces.items() if isinstance(pieces, Mapping) else pieces
    return [
        make_index(p, square, piece, ksq)
        for square, piece in sorted((_check_square(s), _check_piece(pc)) for s, pc in items)
        if piece != NO_PIECE and _piece_type(piece) != KING
    ]


def changed_indices(
    perspective: int, king_square: int, dirty: DirtyPiece
) -> tuple[list[int], list[int]]:
    """Return the removed and added feature indices for one move."""
    p = _check_perspective(perspective)
    ksq = orient(p, king_square)
    removed: list[int] = []
    added: list[int] = []
    for piece, from_sq, to_sq in dirty.changes:
        if _piece_type(piece) == KING:
            continue
        if from_sq is not None:
            removed.append(make_index(p, from_sq, piece, ksq))
        if to_sq is not None:
            added.append(make_index(p, to_sq, piece, ksq))
    return removed, added


def update_cost(dirty: DirtyPiece) -> int:
    """Return the cost of an incremental update for one perspective."""
    return dirty.dirty_num


def refresh_cost(piece_count: int) -> int:
    """Return the cost of a full refresh given the number of pieces on the board."""
    return piece_count - 2


def requires_refresh(dirty: DirtyPiece, perspective: int) -> bool:
    """Return whether the move moved the perspective's own king."""
    p = _check_perspective(perspective)
    if not dirty.changes:
        return False
    return dirty.changes[0][0] == _make_piece(p, KING)