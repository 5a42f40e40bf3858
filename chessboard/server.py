from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, FileResponse, JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from chessboard import config
from chessboard.game_state import HistorySnapshot
from chessboard.selection import ClickOutcome
from chessboard.session import GameSession

_LOGGER = logging.getLogger(__name__)

app = FastAPI(title="chessboard")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parent
TEMPLATE_PATH = BASE_DIR / "templates" / "index.html"
CLIENT_PY_PATH = BASE_DIR / "client.py"
PYSCRIPT_TOML_PATH = BASE_DIR / "pyscript.toml"

# ---- Game room storage ----
# One GameSession per room; rooms never share state.
Room = dict[str, Any]
rooms: dict[str, Room] = {}


class LoadRequest(BaseModel):
    fen: str


class RoomsFull(Exception):
    """Every room slot is taken by a game someone is still watching."""


@app.exception_handler(RoomsFull)
async def rooms_full_handler(request, exc: RoomsFull) -> JSONResponse:
    _LOGGER.warning("room limit reached, refusing %s", exc)
    return JSONResponse(status_code=503, content={"detail": "too many active games"})


def new_room() -> Room:
    return {
        "session": GameSession(),
        "clients": {},  # websocket -> flipped (orientation is per viewer)
    }


def evict_rooms(limit: int) -> None:
    """Drop the oldest idle rooms until there is space for one more."""
    for game_id in list(rooms):
        if len(rooms) < limit:
            return
        if not rooms[game_id]["clients"]:
            _LOGGER.info("evicting room %s", game_id)
            del rooms[game_id]


def get_room(game_id: str) -> Room:
    room = rooms.get(game_id)
    if room is None:
        evict_rooms(config.MAX_ROOMS)
        if len(rooms) >= config.MAX_ROOMS:
            # Rooms with viewers are never evicted; refuse instead.
            raise RoomsFull(game_id)
        room = new_room()
        rooms[game_id] = room
    return room


async def broadcast(room: Room) -> None:
    clients: dict[WebSocket, bool] = room["clients"]
    if not clients:
        return

    session: GameSession = room["session"]
    await asyncio.gather(
        *[ws.send_text(json.dumps(session.payload(flipped))) for ws, flipped in list(clients.items())],
        return_exceptions=True,
    )


def handle_message(room: Room, websocket: WebSocket, msg: dict[str, Any]) -> tuple[bool, dict[str, Any] | None]:
    """
    Apply one client message to the room.

    Returns (changed, reply): `changed` means every viewer needs the new state;
    `reply` is an extra message for the sender only.
    """
    session: GameSession = room["session"]
    clients: dict[WebSocket, bool] = room["clients"]
    msg_type = msg.get("type")

    if msg_type == "click":
        if msg.get("square"):
            target = str(msg["square"])
        else:
            target = (msg.get("row"), msg.get("col"))
        outcome = session.handle_square_click(target, clients.get(websocket, False))
        return outcome is not ClickOutcome.IGNORED, None

    if msg_type == "move":
        from_sq = msg.get("from")
        to_sq = msg.get("to")
        if not (from_sq and to_sq):
            return False, None
        promo = msg.get("promotion")
        moved = session.move(str(from_sq), str(to_sq), str(promo) if promo else None)
        return moved is not None, None

    if msg_type == "flip":
        clients[websocket] = not clients.get(websocket, False)
        return False, None

    if msg_type == "reset":
        session.new_game()
        return True, None

    if msg_type == "undo":
        return session.undo() is not None, None

    if msg_type == "load":
        return session.load_position(str(msg.get("fen") or "")), None

    if msg_type == "history":
        try:
            ply = int(msg.get("ply"))
        except (TypeError, ValueError, OverflowError):
            return False, None
        snapshot = session.snapshot_at_ply(ply)
        return False, snapshot.payload() if snapshot else None

    if msg_type == "export":
        fmt = msg.get("format", "fen")
        text = session.export_pgn() if fmt == "pgn" else session.export_fen()
        return False, {"type": "export", "format": "pgn" if fmt == "pgn" else "fen", "text": text}

    return False, None


# ---- Serve frontend files ----
@app.get("/")
async def index() -> HTMLResponse:
    html = TEMPLATE_PATH.read_text(encoding="utf-8")
    return HTMLResponse(html)


@app.get("/client.py")
async def serve_client_py() -> FileResponse:
    return FileResponse(CLIENT_PY_PATH)


@app.get("/pyscript.toml")
async def serve_pyscript_toml() -> FileResponse:
    return FileResponse(PYSCRIPT_TOML_PATH)


@app.get("/health")
async def health() -> dict[str, Any]:
    return {"ok": True, "rooms": len(rooms)}


# ---- HTTP API ----
@app.get("/api/games/{game_id}/state")
async def game_state(game_id: str, flipped: bool = False) -> dict[str, Any]:
    return get_room(game_id)["session"].payload(flipped)


@app.post("/api/games/{game_id}/load")
async def load_game(game_id: str, req: LoadRequest) -> dict[str, Any]:
    room = get_room(game_id)
    session: GameSession = room["session"]
    if not session.load_position(req.fen):
        raise HTTPException(400, "invalid FEN")
    await broadcast(room)
    return session.payload()


@app.get("/api/games/{game_id}/history/{ply}")
async def game_history(game_id: str, ply: int) -> dict[str, Any]:
    snapshot: HistorySnapshot | None = get_room(game_id)["session"].snapshot_at_ply(ply)
    if snapshot is None:
        raise HTTPException(404, "ply out of range")
    return snapshot.payload()


@app.get("/api/games/{game_id}/pgn")
async def game_pgn(game_id: str) -> PlainTextResponse:
    return PlainTextResponse(get_room(game_id)["session"].export_pgn())


# ---- WebSocket endpoint ----
@app.websocket("/ws/game/{game_id}")
async def ws_game(websocket: WebSocket, game_id: str) -> None:
    await websocket.accept()

    try:
        room = get_room(game_id)
    except RoomsFull:
        _LOGGER.warning("room limit reached, closing socket for %s", game_id)
        await websocket.close(code=1013)
        return
    clients: dict[WebSocket, bool] = room["clients"]
    session: GameSession = room["session"]

    clients[websocket] = False

    try:
        # Send initial state
        await websocket.send_text(json.dumps(session.payload()))

        while True:
            data = await websocket.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                _LOGGER.debug("room %s: bad message %r", game_id, data)
                msg = {}
            if not isinstance(msg, dict):
                msg = {}

            changed, reply = handle_message(room, websocket, msg)
            if reply is not None:
                await websocket.send_text(json.dumps(reply))
            elif changed:
                await broadcast(room)
            else:
                # Nothing changed for the others: send current state back
                await websocket.send_text(json.dumps(session.payload(clients.get(websocket, False))))

    except WebSocketDisconnect:
        _LOGGER.debug("room %s: viewer left", game_id)
    finally:
        clients.pop(websocket, None)


def main() -> None:
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
