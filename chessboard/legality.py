from chessboard.oracle import ChessGame


class MoveLegalityCache:
    """Legal destinations for the selected square, fetched once per selection."""

    def __init__(self, oracle: ChessGame) -> None:
        self._oracle = oracle
        self._origin: str | None = None
        self._destinations: frozenset[str] = frozenset()

    @property
    def origin(self) -> str | None:
        return self._origin

    @property
    def destinations(self) -> frozenset[str]:
        return self._destinations

    def refresh(self, square: str) -> frozenset[str]:
        self._origin = square
        self._destinations = frozenset(self._oracle.legal_destinations(square))
        return self._destinations

    def contains(self, square: str, dest: str) -> bool:
        # Never asks the oracle; only what refresh() stored.
        return square == self._origin and dest in self._destinations

    def clear(self) -> None:
        self._origin = None
        self._destinations = frozenset()
