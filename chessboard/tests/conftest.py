import pytest
from fastapi.testclient import TestClient

from chessboard.server import app
from chessboard.session import GameSession


def _play(session: GameSession, *moves: str) -> None:
    # UCI-style moves ("e2e4", "e7e8q") straight through the session
    for uci in moves:
        promotion = uci[4:] or None
        record = session.move(uci[:2], uci[2:4], promotion)
        assert record is not None, f"{uci} should be legal"


@pytest.fixture
def play():
    return _play


@pytest.fixture
def session() -> GameSession:
    return GameSession()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
