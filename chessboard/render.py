from dataclasses import asdict, dataclass

from chessboard.coords import oriented_files, oriented_ranks, parse_square, to_square
from chessboard.game_state import GameState
from chessboard.position import board_rows, piece_at

GLYPHS = {
    "K": "♔", "Q": "♕", "R": "♖", "B": "♗", "N": "♘", "P": "♙",
    "k": "♚", "q": "♛", "r": "♜", "b": "♝", "n": "♞", "p": "♟",
}


@dataclass(frozen=True)
class SquareView:
    square: str
    row: int
    col: int
    piece: str | None
    glyph: str
    dark: bool
    selected: bool = False
    legal_target: bool = False
    last_move: bool = False
    in_check: bool = False


def render_board(
    state: GameState,
    selected: str | None = None,
    legal: frozenset[str] = frozenset(),
    flipped: bool = False,
) -> list[list[SquareView]]:
    """Rows of square descriptors in the order they appear on screen."""
    grid = board_rows(state.fen)
    last = state.last_move
    last_squares = {last.from_square, last.to_square} if last else set()
    king_in_check = None
    if state.is_check:
        king_in_check = "K" if state.turn == "white" else "k"

    rows = []
    for row in range(8):
        cells = []
        for col in range(8):
            square = to_square((row, col), flipped)
            file, rank = parse_square(square)
            piece = grid[7 - rank][file]
            cells.append(
                SquareView(
                    square=square,
                    row=row,
                    col=col,
                    piece=piece,
                    glyph=GLYPHS.get(piece, "") if piece else "",
                    # a1 is dark
                    dark=(file + rank) % 2 == 0,
                    selected=square == selected,
                    legal_target=square in legal,
                    last_move=square in last_squares,
                    in_check=piece is not None and piece == king_in_check,
                )
            )
        rows.append(cells)
    return rows


def board_labels(flipped: bool = False) -> dict[str, list[str]]:
    return {"files": oriented_files(flipped), "ranks": oriented_ranks(flipped)}


def board_payload(
    state: GameState,
    selected: str | None,
    legal: frozenset[str],
    flipped: bool = False,
) -> dict:
    payload = state.state_payload()
    payload.update(
        {
            "flipped": flipped,
            "selected": selected,
            "legalTargets": sorted(legal),
            "selectedPiece": piece_at(state.fen, selected) if selected else None,
            "labels": board_labels(flipped),
            "board": [[asdict(cell) for cell in row] for row in render_board(state, selected, legal, flipped)],
        }
    )
    return payload
