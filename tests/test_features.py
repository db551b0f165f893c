import pytest

from nnuecore import features as f


def test_orient_white_is_identity():
    assert [f.orient(f.WHITE, s) for s in range(64)] == list(range(64))


def test_orient_black_rotates():
    assert f.orient(f.BLACK, 0) == 63
    assert f.orient(f.BLACK, 63) == 0
    assert all(f.orient(f.BLACK, f.orient(f.BLACK, s)) == s for s in range(64))


def test_make_index_white_pawn_base():
    assert f.make_index(f.WHITE, 0, f.W_PAWN, 0) == f.PS_W_PAWN


def test_make_index_symmetry_between_perspectives():
    pairs = [(f.W_PAWN, f.B_PAWN), (f.W_KNIGHT, f.B_KNIGHT), (f.W_QUEEN, f.B_QUEEN),
             (f.B_ROOK, f.W_ROOK)]
    for own, mirrored in pairs:
        for square in (0, 9, 35, 63):
            for ksq in (0, 4, 60):
                assert f.make_index(f.WHITE, square, own, ksq) == f.make_index(
                    f.BLACK, square ^ 63, mirrored, ksq
                )


def test_indices_are_in_range_and_distinct():
    seen = set()
    for piece in (f.W_PAWN, f.W_KNIGHT, f.W_BISHOP, f.W_ROOK, f.W_QUEEN,
                  f.B_PAWN, f.B_KNIGHT, f.B_BISHOP, f.B_ROOK, f.B_QUEEN):
        for square in range(64):
            index = f.make_index(f.WHITE, square, piece, 63)
            assert 0 <= index < f.DIMENSIONS
            seen.add(index)
    assert len(seen) == 10 * 64


def test_make_index_rejects_bad_piece():
    with pytest.raises(ValueError):
        f.make_index(f.WHITE, 0, 16, 0)


def test_make_index_rejects_bad_square_and_perspective():
    with pytest.raises(ValueError):
        f.make_index(f.WHITE, 64, f.W_PAWN, 0)
    with pytest.raises(ValueError):
        f.orient(2, 0)


def test_active_indices_skip_kings_and_sort_by_square():
    pieces = {12: f.W_PAWN, 4: f.W_KING, 60: f.B_KING, 1: f.B_KNIGHT}
    result = f.active_indices(f.WHITE, 4, pieces)
    expected = [
        f.make_index(f.WHITE, 1, f.B_KNIGHT, 4),
        f.make_index(f.WHITE, 12, f.W_PAWN, 4),
    ]
    assert result == expected


def test_active_indices_orient_king_for_black():
    pieces = [(12, f.W_PAWN)]
    result = f.active_indices(f.BLACK, 60, pieces)
    assert result == [f.make_index(f.BLACK, 12, f.W_PAWN, f.orient(f.BLACK, 60))]


def test_changed_indices_for_quiet_move():
    dirty = f.DirtyPiece(((f.W_KNIGHT, 6, 21),))
    removed, added = f.changed_indices(f.WHITE, 4, dirty)
    assert removed == [f.make_index(f.WHITE, 6, f.W_KNIGHT, 4)]
    assert added == [f.make_index(f.WHITE, 21, f.W_KNIGHT, 4)]


def test_changed_indices_capture_and_king_ignored():
    dirty = f.DirtyPiece(((f.W_KING, 4, 5), (f.B_PAWN, 13, None)))
    removed, added = f.changed_indices(f.BLACK, 60, dirty)
    ksq = f.orient(f.BLACK, 60)
    assert removed == [f.make_index(f.BLACK, 13, f.B_PAWN, ksq)]
    assert added == []


def test_dirty_piece_limits():
    with pytest.raises(ValueError):
        f.DirtyPiece(((1, 0, 1),) * 4)
    with pytest.raises(ValueError):
        f.DirtyPiece(((1, 0, 64),))


def test_update_and_refresh_cost():
    dirty = f.DirtyPiece(((f.W_PAWN, 8, 16), (f.B_PAWN, 16, None)))
    assert f.update_cost(dirty) == dirty.dirty_num == 2
    assert f.refresh_cost(32) == f.MAX_ACTIVE_DIMENSIONS


def test_requires_refresh_only_for_own_king():
    white_king_move = f.DirtyPiece(((f.W_KING, 4, 5),))
    assert f.requires_refresh(white_king_move, f.WHITE) is True
    assert f.requires_refresh(white_king_move, f.BLACK) is False
    assert f.requires_refresh(f.DirtyPiece(), f.WHITE) is False