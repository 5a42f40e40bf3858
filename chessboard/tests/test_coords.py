import pytest
import chess

from chessboard.coords import (
    InvalidSquareError,
    VisualCell,
    is_valid_square,
    oriented_files,
    oriented_ranks,
    parse_square,
    square_index,
    square_name,
    to_square,
    to_visual,
)

ALL_SQUARES = [f"{f}{r}" for f in "abcdefgh" for r in "12345678"]


@pytest.mark.parametrize("flipped", [False, True])
@pytest.mark.parametrize("square", ALL_SQUARES)
def test_visual_round_trip(square: str, flipped: bool) -> None:
    assert to_square(to_visual(square, flipped), flipped) == square


@pytest.mark.parametrize("flipped", [False, True])
def test_visual_mapping_is_a_bijection(flipped: bool) -> None:
    cells = {to_visual(sq, flipped) for sq in ALL_SQUARES}
    assert cells == {VisualCell(r, c) for r in range(8) for c in range(8)}


def test_corners_unflipped() -> None:
    # White at the bottom: a8 top-left, h1 bottom-right
    assert to_visual("a8") == (0, 0)
    assert to_visual("h8") == (0, 7)
    assert to_visual("a1") == (7, 0)
    assert to_visual("h1") == (7, 7)


def test_corners_flipped() -> None:
    # Black at the bottom: h1 top-left, a8 bottom-right
    assert to_visual("h1", flipped=True) == (0, 0)
    assert to_visual("a1", flipped=True) == (0, 7)
    assert to_visual("h8", flipped=True) == (7, 0)
    assert to_visual("a8", flipped=True) == (7, 7)


def test_same_cell_names_different_squares_per_orientation() -> None:
    assert to_square((6, 4)) == "e2"
    assert to_square((6, 4), flipped=True) == "d7"


def test_square_index_matches_a1_zero_numbering() -> None:
    assert square_index("a1") == 0
    assert square_index("h1") == 7
    assert square_index("a8") == 56
    assert square_index("e4") == 28


def test_parse_and_name_are_inverse() -> None:
    for sq in ALL_SQUARES:
        assert square_name(*parse_square(sq)) == sq


@pytest.mark.parametrize("square", ALL_SQUARES)
def test_square_index_agrees_with_python_chess(square: str) -> None:
    assert square_index(square) == chess.parse_square(square)
    assert square_index(square.upper()) == chess.parse_square(square)


@pytest.mark.parametrize("bad", ["", "e", "e9", "i1", "a0", "e44", "11", None, 42])
def test_invalid_square_is_rejected(bad) -> None:
    assert not is_valid_square(bad)
    with pytest.raises(InvalidSquareError):
        parse_square(bad)


@pytest.mark.parametrize(
    "cell",
    [(8, 0), (0, 8), (-1, 3), (3, -1), ("x", 1), (1,), (float("inf"), 0), (0, float("nan")), (6.5, 4), (6.0, 4), (False, 0)],
)
def test_invalid_cell_is_rejected(cell) -> None:
    with pytest.raises(InvalidSquareError):
        to_square(cell)


def test_invalid_square_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        to_visual("z9")


def test_label_order_follows_orientation() -> None:
    assert oriented_files() == list("abcdefgh")
    assert oriented_files(flipped=True) == list("hgfedcba")
    assert oriented_ranks() == list("87654321")
    assert oriented_ranks(flipped=True) == list("12345678")
