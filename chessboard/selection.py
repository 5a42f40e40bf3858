"""
Click handling for the board.

The machine is either idle (nothing selected) or has one square selected.
Its legal destinations come from MoveLegalityCache, so a click never costs
more than one oracle query, made when the selection changes.
"""

import enum
import logging
from collections.abc import Callable

from chessboard.coords import is_valid_square, parse_square
from chessboard.game_state import GameState
from chessboard.legality import MoveLegalityCache
from chessboard.oracle import MoveRecord
from chessboard.position import piece_at, piece_color

_LOGGER = logging.getLogger(__name__)

MoveRequest = Callable[[str, str, str | None], MoveRecord | None]


class ClickOutcome(enum.Enum):
    IGNORED = "ignored"
    SELECTED = "selected"
    DESELECTED = "deselected"
    MOVED = "moved"
    REJECTED = "rejected"


class SelectionStateMachine:
    def __init__(
        self,
        cache: MoveLegalityCache,
        request_move: MoveRequest,
        *,
        promotion: str = "q",
        logger: logging.Logger | None = None,
    ) -> None:
        self._cache = cache
        self._request_move = request_move
        self._selected: str | None = None
        self.promotion = promotion
        self._log = logger or _LOGGER

    @property
    def selected(self) -> str | None:
        return self._selected

    @property
    def legal_moves(self) -> frozenset[str]:
        if self._selected is None:
            return frozenset()
        return self._cache.destinations

    def clear(self) -> None:
        """Drop the selection and its cached destinations."""
        self._selected = None
        self._cache.clear()

    def _select(self, square: str) -> None:
        self._selected = square
        destinations = self._cache.refresh(square)
        self._log.debug("selected %s -> %s", square, sorted(destinations))

    def promotion_for(self, fen: str, src: str, dst: str) -> str | None:
        """Promotion letter to send with src->dst, or None if it is not a promotion."""
        piece = piece_at(fen, src)
        if piece not in ("P", "p"):
            return None
        _, rank = parse_square(dst)
        if (piece == "P" and rank == 7) or (piece == "p" and rank == 0):
            return self.promotion
        return None

    def handle_click(self, square: str, state: GameState) -> ClickOutcome:
        if state.is_game_over or not is_valid_square(square):
            return ClickOutcome.IGNORED

        occupant = piece_at(state.fen, square)
        own_piece = piece_color(occupant) == state.turn

        if self._selected is None:
            if own_piece:
                self._select(square)
                return ClickOutcome.SELECTED
            return ClickOutcome.IGNORED

        if square == self._selected:
            self.clear()
            return ClickOutcome.DESELECTED

        if self._cache.contains(self._selected, square):
            src = self._selected
            promotion = self.promotion_for(state.fen, src, square)
            # Selection goes away whatever the oracle says.
            self.clear()
            record = self._request_move(src, square, promotion)
            if record is None:
                self._log.info("oracle rejected %s-%s", src, square)
                return ClickOutcome.REJECTED
            self._log.debug("moved %s", record.san)
            return ClickOutcome.MOVED

        if own_piece:
            self._select(square)
            return ClickOutcome.SELECTED

        self.clear()
        return ClickOutcome.DESELECTED
