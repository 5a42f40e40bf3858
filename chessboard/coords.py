from typing import NamedTuple

import chess

# Algebraic squares ("e4") never depend on orientation; visual cells do.
FILES = "abcdefgh"
RANKS = "12345678"


class InvalidSquareError(ValueError):
    """Raised when a square name or visual cell falls outside the 8x8 board."""


class VisualCell(NamedTuple):
    row: int
    col: int


def square_index(name: str) -> int:
    """python-chess square number for 'e4' (a1 = 0, h1 = 7, a8 = 56)."""
    if not isinstance(name, str):
        raise InvalidSquareError(f"not a square: {name!r}")
    try:
        return chess.parse_square(name.lower())
    except ValueError:
        raise InvalidSquareError(f"not a square: {name!r}") from None


def parse_square(name: str) -> tuple[int, int]:
    """Turn 'e4' into (file, rank), both 0-based."""
    sq = square_index(name)
    return chess.square_file(sq), chess.square_rank(sq)


def square_name(file: int, rank: int) -> str:
    if not (0 <= file <= 7 and 0 <= rank <= 7):
        raise InvalidSquareError(f"file/rank out of range: {file}, {rank}")
    return chess.square_name(chess.square(file, rank))


def is_valid_square(name: str) -> bool:
    try:
        parse_square(name)
    except InvalidSquareError:
        return False
    return True


def to_visual(square: str, flipped: bool = False) -> VisualCell:
    """
    Screen position of a square.
    Unflipped: row 0 is rank 8, col 0 is the a-file.
    Flipped: row 0 is rank 1, col 0 is the h-file.
    """
    file, rank = parse_square(square)
    if flipped:
        return VisualCell(rank, 7 - file)
    return VisualCell(7 - rank, file)


def _cell_index(value) -> int:
    # Only real ints: no bools, no floats (inf, 6.5), no numeric strings.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSquareError(f"not a cell index: {value!r}")
    if not 0 <= value <= 7:
        raise InvalidSquareError(f"cell index out of range: {value!r}")
    return value


def to_square(cell: tuple[int, int], flipped: bool = False) -> str:
    """Inverse of to_visual for the same orientation."""
    try:
        row, col = cell
    except (TypeError, ValueError):
        raise InvalidSquareError(f"not a visual cell: {cell!r}") from None
    row, col = _cell_index(row), _cell_index(col)
    if flipped:
        return square_name(7 - col, row)
    return square_name(col, 7 - row)


def oriented_files(flipped: bool = False) -> list[str]:
    files = list(FILES)
    return list(reversed(files)) if flipped else files


def oriented_ranks(flipped: bool = False) -> list[str]:
    # Top-to-bottom order as drawn on screen.
    ranks = list(RANKS)
    return ranks if flipped else list(reversed(ranks))
