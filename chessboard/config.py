import logging
import os

LOG_LEVEL = os.getenv("CHESSBOARD_LOG_LEVEL", "INFO").upper()
MAX_ROOMS = int(os.getenv("CHESSBOARD_MAX_ROOMS", "100"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CHESSBOARD_CORS_ORIGINS", "*").split(",") if o.strip()]

# Piece a pawn promotes to when the board is clicked; under-promotion is not offered.
DEFAULT_PROMOTION = os.getenv("CHESSBOARD_PROMOTION", "q").strip().lower()[:1]
if DEFAULT_PROMOTION not in ("q", "r", "b", "n"):
    DEFAULT_PROMOTION = "q"


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
