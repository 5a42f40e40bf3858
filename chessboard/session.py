import logging

from chessboard.config import DEFAULT_PROMOTION
from chessboard.coords import InvalidSquareError, VisualCell, is_valid_square, parse_square, to_square
from chessboard.game_state import GameState, HistorySnapshot, build_game_state, snapshot_at_ply
from chessboard.ledger import CapturedPieceLedger
from chessboard.legality import MoveLegalityCache
from chessboard.oracle import ChessGame, MoveRecord
from chessboard.render import board_payload
from chessboard.selection import ClickOutcome, SelectionStateMachine

_LOGGER = logging.getLogger(__name__)


class GameSession:
    """
    One board and everything hanging off it: the rules oracle, captured
    pieces, the current selection and the last GameState snapshot.

    Sessions share nothing, so a server can hold one per game. All methods
    run to completion synchronously; callers must not use a session from
    more than one thread at a time.
    """

    def __init__(
        self,
        fen: str | None = None,
        *,
        promotion: str = DEFAULT_PROMOTION,
        logger: logging.Logger | None = None,
    ) -> None:
        self._log = logger or _LOGGER
        self.game = ChessGame()
        if fen is not None and not self.game.load_position(fen):
            raise ValueError(f"invalid FEN: {fen!r}")
        self.ledger = CapturedPieceLedger()
        self.cache = MoveLegalityCache(self.game)
        self.selection = SelectionStateMachine(
            self.cache, self._apply_move, promotion=promotion, logger=self._log
        )
        self.state: GameState = build_game_state(self.game, self.ledger)

    @property
    def selected(self) -> str | None:
        return self.selection.selected

    @property
    def legal_moves(self) -> frozenset[str]:
        return self.selection.legal_moves

    def _rebuild(self) -> None:
        self.state = build_game_state(self.game, self.ledger)

    def _apply_move(self, src: str, dst: str, promotion: str | None) -> MoveRecord | None:
        record = self.game.attempt_move(src, dst, promotion)
        if record is None:
            return None
        self.ledger.record_move(record)
        self._rebuild()
        return record

    def handle_square_click(self, target: str | tuple[int, int], flipped: bool = False) -> ClickOutcome:
        """
        Feed one click into the selection machine.

        `target` is either an algebraic square or a (row, col) visual cell;
        `flipped` only matters for the latter.
        """
        try:
            if isinstance(target, str):
                parse_square(target)
                square = target.lower()
            else:
                square = to_square(VisualCell(*target), flipped)
        except (InvalidSquareError, TypeError) as exc:
            self._log.debug("ignoring click: %s", exc)
            return ClickOutcome.IGNORED
        return self.selection.handle_click(square, self.state)

    def move(self, src: str, dst: str, promotion: str | None = None) -> MoveRecord | None:
        """Play src->dst directly, bypassing the selection."""
        if self.state.is_game_over:
            return None
        if not (is_valid_square(src) and is_valid_square(dst)):
            return None
        self.selection.clear()
        if promotion is None:
            promotion = self.selection.promotion_for(self.state.fen, src, dst)
        record = self._apply_move(src, dst, promotion)
        if record is None:
            self._log.info("rejected move %s-%s", src, dst)
        return record

    def new_game(self) -> None:
        self.game.reset()
        self.ledger.clear()
        self.selection.clear()
        self._rebuild()

    def undo(self) -> MoveRecord | None:
        record = self.game.undo()
        self.selection.clear()
        if record is None:
            return None
        self.ledger.record_undo(record)
        self._rebuild()
        self._log.debug("undid %s", record.san)
        return record

    def load_position(self, fen: str) -> bool:
        if not self.game.load_position(fen):
            self._log.warning("rejected FEN %r", fen)
            return False
        self.ledger.clear()
        self.selection.clear()
        self._rebuild()
        return True

    def snapshot_at_ply(self, ply: int) -> HistorySnapshot | None:
        try:
            return snapshot_at_ply(self.game, ply)
        except IndexError:
            return None

    def export_fen(self) -> str:
        return self.state.fen

    def export_pgn(self) -> str:
        return self.game.pgn()

    def payload(self, flipped: bool = False) -> dict:
        """State message for a client looking at the board from `flipped`."""
        return board_payload(self.state, self.selected, self.legal_moves, flipped)
