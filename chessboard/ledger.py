from chessboard.oracle import MoveRecord
from chessboard.position import piece_color

COLORS = ("white", "black")


class CapturedPieceLedger:
    """
    Captured pieces per colour, in capture order.

    Each colour's list is a stack: a move that captured pushes onto the
    victim's colour, and undoing that same move pops it again. Letters are
    normalised so white pieces are uppercase and black pieces lowercase.
    """

    def __init__(self) -> None:
        self._captured: dict[str, list[str]] = {color: [] for color in COLORS}

    def record_move(self, record: MoveRecord) -> None:
        if not record.captured:
            return
        color = piece_color(record.captured)
        if color is None:
            return
        self._captured[color].append(record.captured)

    def record_undo(self, record: MoveRecord) -> None:
        if not record.captured:
            return
        color = piece_color(record.captured)
        if color is None or not self._captured[color]:
            return
        self._captured[color].pop()

    def clear(self) -> None:
        for stack in self._captured.values():
            stack.clear()

    def pieces(self, color: str) -> list[str]:
        return list(self._captured[color])

    def snapshot(self) -> dict[str, list[str]]:
        return {color: list(stack) for color, stack in self._captured.items()}

    def __len__(self) -> int:
        return sum(len(stack) for stack in self._captured.values())
