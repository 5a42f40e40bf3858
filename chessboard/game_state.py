from dataclasses import dataclass, field

from chessboard.ledger import CapturedPieceLedger
from chessboard.oracle import ChessGame, MoveRecord, describe_move
from chessboard.position import halfmove_clock


@dataclass(frozen=True)
class GameState:
    """Everything the board and its panels show, read from the oracle in one go."""

    fen: str
    turn: str
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    is_draw: bool = False
    is_threefold_repetition: bool = False
    is_insufficient_material: bool = False
    is_fifty_move_rule: bool = False
    is_game_over: bool = False
    history: tuple[MoveRecord, ...] = ()
    captured: dict[str, list[str]] = field(default_factory=lambda: {"white": [], "black": []})
    move_count: int = 1
    last_move: MoveRecord | None = None

    @property
    def draw_reason(self) -> str | None:
        if not self.is_draw:
            return None
        if self.is_stalemate:
            return "stalemate"
        if self.is_threefold_repetition:
            return "threefold_repetition"
        if self.is_insufficient_material:
            return "insufficient_material"
        if self.is_fifty_move_rule:
            return "fifty_move_rule"
        return "draw"

    def state_payload(self) -> dict:
        """Return the current game state as a JSON-friendly dict."""
        last = None
        if self.last_move is not None:
            last = {"from": self.last_move.from_square, "to": self.last_move.to_square}
        return {
            "type": "state",
            "fen": self.fen,
            "lastMove": last,
            "turn": self.turn,
            "gameOver": self.is_game_over,
            "check": self.is_check,
            "checkmate": self.is_checkmate,
            "stalemate": self.is_stalemate,
            "draw": self.is_draw,
            "drawReason": self.draw_reason,
            "moveCount": self.move_count,
            "history": [record.to_dict() for record in self.history],
            "captured": {color: list(pieces) for color, pieces in self.captured.items()},
        }


def move_count(plies: int) -> int:
    # Full-move number as shown to the user: 1 before the first ply.
    return plies // 2 + 1


def build_game_state(oracle: ChessGame, ledger: CapturedPieceLedger) -> GameState:
    fen = oracle.current_position()
    history = tuple(oracle.history_verbose())
    checkmate = oracle.is_checkmate()
    draw = oracle.is_draw()
    return GameState(
        fen=fen,
        turn=oracle.turn(),
        is_check=oracle.is_check(),
        is_checkmate=checkmate,
        is_stalemate=oracle.is_stalemate(),
        is_draw=draw,
        is_threefold_repetition=oracle.is_threefold_repetition(),
        is_insufficient_material=oracle.is_insufficient_material(),
        is_fifty_move_rule=halfmove_clock(fen) >= 100,
        is_game_over=checkmate or draw,
        history=history,
        captured=ledger.snapshot(),
        move_count=move_count(len(history)),
        last_move=history[-1] if history else None,
    )


@dataclass(frozen=True)
class HistorySnapshot:
    """Read-only view of the game after `ply` plies; the live game is untouched."""

    ply: int
    fen: str
    last_move: MoveRecord | None

    def payload(self) -> dict:
        last = None
        if self.last_move is not None:
            last = {"from": self.last_move.from_square, "to": self.last_move.to_square}
        return {"type": "snapshot", "ply": self.ply, "fen": self.fen, "lastMove": last}


def snapshot_at_ply(oracle: ChessGame, ply: int) -> HistorySnapshot:
    """Replay the first `ply` moves on a copy of the starting board."""
    moves = oracle.board.move_stack
    if ply < 0 or ply > len(moves):
        raise IndexError(f"ply {ply} out of range 0..{len(moves)}")
    replay = oracle.board.root()
    last = None
    for move in moves[:ply]:
        last = describe_move(replay, move)
        replay.push(move)
    return HistorySnapshot(ply=ply, fen=replay.fen(), last_move=last)
