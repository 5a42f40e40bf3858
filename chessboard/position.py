"""
Read-only helpers over a FEN string.

Only the piece placement and the half-move clock are interpreted here;
everything else about the position belongs to the rules oracle.
Malformed placement never raises: the affected squares read as empty.
"""

from chessboard.coords import InvalidSquareError, parse_square

PIECE_LETTERS = frozenset("pnbrqkPNBRQK")
EMPTY_DIGITS = frozenset("12345678")


def placement_field(fen: str) -> str:
    """Return the piece-placement field (accepts a full FEN or just the field)."""
    if not isinstance(fen, str):
        return ""
    parts = fen.strip().split()
    return parts[0] if parts else ""


def halfmove_clock(fen: str) -> int:
    """Half-move clock (5th FEN field); 0 when missing or not a number."""
    parts = fen.split() if isinstance(fen, str) else []
    if len(parts) < 5:
        return 0
    try:
        return max(int(parts[4]), 0)
    except ValueError:
        return 0


def piece_color(piece: str | None) -> str | None:
    if not piece or piece not in PIECE_LETTERS:
        return None
    return "white" if piece.isupper() else "black"


def _walk_rank(rank_str: str) -> list[str | None] | None:
    """Expand one rank into 8 entries, or None if it doesn't cover exactly 8 columns."""
    row: list[str | None] = []
    for char in rank_str:
        if char in PIECE_LETTERS:
            row.append(char)
        elif char in EMPTY_DIGITS:
            row.extend([None] * int(char))
        else:
            return None
        if len(row) > 8:
            return None
    return row if len(row) == 8 else None


def piece_at(fen: str, square: str) -> str | None:
    """
    FEN letter of the piece on `square`, or None when the square is empty.

    Uppercase is white, lowercase is black. An invalid square or a malformed
    rank also gives None.
    """
    try:
        file, rank = parse_square(square)
    except InvalidSquareError:
        return None
    ranks = placement_field(fen).split("/")
    if len(ranks) != 8:
        return None
    row = _walk_rank(ranks[7 - rank])
    if row is None:
        return None
    return row[file]


def board_rows(fen: str) -> list[list[str | None]]:
    """8x8 grid of FEN letters, rank 8 first, a-file first. Bad ranks are blank."""
    ranks = placement_field(fen).split("/")
    if len(ranks) != 8:
        return [[None] * 8 for _ in range(8)]
    rows = []
    for rank_str in ranks:
        row = _walk_rank(rank_str)
        rows.append(row if row is not None else [None] * 8)
    return rows


def is_well_formed(fen: str) -> bool:
    ranks = placement_field(fen).split("/")
    return len(ranks) == 8 and all(_walk_rank(r) is not None for r in ranks)
