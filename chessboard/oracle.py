from dataclasses import dataclass

import chess
import chess.pgn

from chessboard.coords import InvalidSquareError, square_index

PROMOTION_PIECES = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


@dataclass(frozen=True)
class MoveRecord:
    from_square: str
    to_square: str
    piece: str
    color: str
    san: str
    uci: str
    flags: str
    captured: str | None = None
    promotion: str | None = None

    def to_dict(self) -> dict:
        return {
            "from": self.from_square,
            "to": self.to_square,
            "piece": self.piece,
            "color": self.color,
            "captured": self.captured,
            "promotion": self.promotion,
            "san": self.san,
            "uci": self.uci,
            "flags": self.flags,
        }


def color_name(color: chess.Color) -> str:
    return "white" if color == chess.WHITE else "black"


def describe_move(board: chess.Board, move: chess.Move) -> MoveRecord:
    """Build a MoveRecord for `move`, which must be legal on `board` (not yet pushed)."""
    piece = board.piece_at(move.from_square)
    mover = board.turn

    captured = None
    flags = ""
    if board.is_en_passant(move):
        captured = chess.Piece(chess.PAWN, not mover).symbol()
        flags += "e"
    elif board.is_capture(move):
        victim = board.piece_at(move.to_square)
        captured = victim.symbol() if victim else None
        flags += "c"
    if board.is_kingside_castling(move):
        flags += "k"
    elif board.is_queenside_castling(move):
        flags += "q"
    if move.promotion:
        flags += "p"
    if piece and piece.piece_type == chess.PAWN and abs(move.to_square - move.from_square) == 16:
        flags += "b"

    return MoveRecord(
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
        piece=piece.symbol() if piece else "?",
        color=color_name(mover),
        san=board.san(move),
        uci=move.uci(),
        flags=flags or "n",
        captured=captured,
        promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
    )


# Wraps python-chess; everything about chess rules is answered here
class ChessGame:
    def __init__(self, fen: str | None = None) -> None:
        self.board = chess.Board(fen) if fen else chess.Board()

    def reset(self) -> None:
        """Reset the game to the initial position."""
        self.board = chess.Board()

    def load_position(self, fen: str) -> bool:
        """
        Replace the game with a new position.
        Returns False (and keeps the current game) if the FEN is rejected.
        """
        try:
            board = chess.Board(fen)
        except (ValueError, TypeError):
            return False
        if not board.is_valid():
            return False
        self.board = board
        return True

    def current_position(self) -> str:
        return self.board.fen()

    def turn(self) -> str:
        return color_name(self.board.turn)

    def is_check(self) -> bool:
        return self.board.is_check()

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_threefold_repetition(self) -> bool:
        return self.board.is_repetition(3)

    def is_insufficient_material(self) -> bool:
        return self.board.is_insufficient_material()

    def is_draw(self) -> bool:
        return (
            self.board.halfmove_clock >= 100
            or self.is_stalemate()
            or self.is_insufficient_material()
            or self.is_threefold_repetition()
        )

    def is_game_over(self) -> bool:
        return self.is_checkmate() or self.is_draw()

    def ply_count(self) -> int:
        return len(self.board.move_stack)

    def history_verbose(self) -> list[MoveRecord]:
        """Every move played since the starting position, oldest first."""
        replay = self.board.root()
        records = []
        for move in self.board.move_stack:
            records.append(describe_move(replay, move))
            replay.push(move)
        return records

    def legal_destinations(self, square: str) -> set[str]:
        """Destination squares for the piece on `square`; empty for bad or empty squares."""
        try:
            origin = square_index(square)
        except InvalidSquareError:
            return set()
        return {
            chess.square_name(mv.to_square)
            for mv in self.board.legal_moves
            if mv.from_square == origin
        }

    def attempt_move(self, src: str, dst: str, promotion: str | None = "q") -> MoveRecord | None:
        """
        Try to play a move.
        Returns its record if it was legal and applied, None otherwise.
        The promotion piece only matters when a pawn reaches the last rank.
        """
        try:
            from_sq, to_sq = square_index(src), square_index(dst)
        except InvalidSquareError:
            return None

        move = chess.Move(from_sq, to_sq)
        if move not in self.board.legal_moves:
            promo_piece = PROMOTION_PIECES.get((promotion or "").strip()[:1].lower())
            if promo_piece is None:
                return None
            move = chess.Move(from_sq, to_sq, promotion=promo_piece)
            if move not in self.board.legal_moves:
                return None

        record = describe_move(self.board, move)
        self.board.push(move)
        return record

    def undo(self) -> MoveRecord | None:
        """Take back the last move and return its record, or None if nothing was played."""
        if not self.board.move_stack:
            return None
        move = self.board.pop()
        return describe_move(self.board, move)

    def board_copy(self) -> chess.Board:
        return self.board.copy()

    def pgn(self) -> str:
        game = chess.pgn.Game.from_board(self.board)
        return str(game)
