from js import document, WebSocket
from pyodide.ffi import create_proxy
import json as _json
import random

# Runs in the browser under PyScript. The server owns the game and the
# selection; this script only draws what it is sent and forwards clicks.

# ---- DOM elements ----
BOARD = document.getElementById("board")
WS_STATUS = document.getElementById("ws-status")
TURN = document.getElementById("turn")
FEN = document.getElementById("fen")
STATUS = document.getElementById("status")
MOVE_COUNT = document.getElementById("move-count")
HISTORY = document.getElementById("history")
CAPTURED_WHITE = document.getElementById("captured-white")
CAPTURED_BLACK = document.getElementById("captured-black")
GID = document.getElementById("gid")

GAME_CODE = document.getElementById("game-code")
OPEN_BTN = document.getElementById("open-btn")
FEN_INPUT = document.getElementById("fen-input")
EXPORT_OUT = document.getElementById("export-out")

# ---- Config ----
ORIGIN = str(document.location.origin)
BASE_WS = ORIGIN.replace("http://", "ws://").replace("https://", "wss://")

GLYPHS = {
    "K": "♔", "Q": "♕", "R": "♖", "B": "♗", "N": "♘", "P": "♙",
    "k": "♚", "q": "♛", "r": "♜", "b": "♝", "n": "♞", "p": "♟",
}

# ---- Local UI state ----
GAME_ID = None
ws = None


def set_status(text: str) -> None:
    WS_STATUS.innerText = text


def generate_game_id(length: int = 6) -> str:
    # Short, friendly code; avoid ambiguous chars
    alphabet = "abcdefghjkmnpqrstuvwxyz23456789"
    return "".join(random.choice(alphabet) for _ in range(length))


def send(msg: dict) -> None:
    if ws is None:
        return
    ws.send(_json.dumps(msg))


def status_text(state: dict) -> str:
    if state.get("checkmate"):
        winner = "Black" if state.get("turn") == "white" else "White"
        return f"Checkmate, {winner} wins"
    if state.get("draw"):
        reason = (state.get("drawReason") or "draw").replace("_", " ")
        return f"Draw ({reason})"
    if state.get("check"):
        return "Check"
    return ""


def render_board(state: dict) -> None:
    while BOARD.firstChild:
        BOARD.removeChild(BOARD.firstChild)

    labels = state.get("labels", {})
    files = labels.get("files", [])
    ranks = labels.get("ranks", [])

    for r_idx, row in enumerate(state.get("board", [])):
        for f_idx, cell in enumerate(row):
            btn = document.createElement("button")
            btn.classList.add("sq")
            btn.classList.add("dark" if cell["dark"] else "light")
            btn.setAttribute("data-sq", cell["square"])

            if cell["last_move"]:
                btn.classList.add("last")
            if cell["selected"]:
                btn.classList.add("selected")
            if cell["legal_target"]:
                btn.classList.add("target")
            if cell["in_check"]:
                btn.classList.add("check")

            btn.innerText = cell["glyph"]

            if r_idx == 7 and f_idx < len(files):
                lab = document.createElement("span")
                lab.classList.add("coord", "file")
                lab.innerText = files[f_idx]
                btn.appendChild(lab)
            if f_idx == 0 and r_idx < len(ranks):
                lab = document.createElement("span")
                lab.classList.add("coord", "rank")
                lab.innerText = ranks[r_idx]
                btn.appendChild(lab)

            def on_click(ev, sq=cell["square"]):
                send({"type": "click", "square": sq})

            btn.addEventListener("click", create_proxy(on_click))
            BOARD.appendChild(btn)


def render_history(state: dict) -> None:
    while HISTORY.firstChild:
        HISTORY.removeChild(HISTORY.firstChild)

    for idx, record in enumerate(state.get("history", [])):
        item = document.createElement("button")
        item.classList.add("ply")
        prefix = f"{idx // 2 + 1}. " if idx % 2 == 0 else ""
        item.innerText = prefix + record["san"]

        def on_pick(ev, ply=idx + 1):
            send({"type": "history", "ply": ply})

        item.addEventListener("click", create_proxy(on_pick))
        HISTORY.appendChild(item)


def render_state(state: dict) -> None:
    TURN.innerText = state.get("turn", "—")
    FEN.innerText = state.get("fen", "")
    MOVE_COUNT.innerText = str(state.get("moveCount", ""))
    STATUS.innerText = status_text(state)
    captured = state.get("captured", {})
    CAPTURED_WHITE.innerText = " ".join(GLYPHS.get(p, p) for p in captured.get("white", []))
    CAPTURED_BLACK.innerText = " ".join(GLYPHS.get(p, p) for p in captured.get("black", []))
    render_board(state)
    render_history(state)


def render_snapshot(snapshot: dict) -> None:
    # Read-only preview; the live board stays as it is.
    STATUS.innerText = f"Position after ply {snapshot.get('ply')}"
    EXPORT_OUT.innerText = snapshot.get("fen", "")


# ---- WebSocket wiring ----
def attach_ws_handlers() -> None:
    def _onopen(evt):
        set_status("connected")

    def _onclose(evt):
        set_status("disconnected")

    def _onerror(evt):
        set_status("error")

    def _onmessage(evt):
        try:
            msg = _json.loads(evt.data)
        except Exception:
            set_status("message error")
            return

        msg_type = msg.get("type")

        if msg_type == "state":
            render_state(msg)
            return

        if msg_type == "snapshot":
            render_snapshot(msg)
            return

        if msg_type == "export":
            EXPORT_OUT.innerText = msg.get("text", "")
            return

    ws.onopen = create_proxy(_onopen)
    ws.onclose = create_proxy(_onclose)
    ws.onerror = create_proxy(_onerror)
    ws.onmessage = create_proxy(_onmessage)


def connect_ws(game_id: str) -> None:
    global ws, GAME_ID

    if ws is not None:
        ws.close()

    GAME_ID = game_id
    GID.innerText = GAME_ID
    ws = WebSocket.new(f"{BASE_WS}/ws/game/{GAME_ID}")
    attach_ws_handlers()


# ---- Buttons ----
def on_flip(_):
    send({"type": "flip"})


def on_new(_):
    send({"type": "reset"})


def on_undo(_):
    send({"type": "undo"})


def on_load(_):
    fen = (FEN_INPUT.value or "").strip()
    if fen:
        send({"type": "load", "fen": fen})


def on_export_fen(_):
    send({"type": "export", "format": "fen"})


def on_export_pgn(_):
    send({"type": "export", "format": "pgn"})


def on_open(_):
    code = (GAME_CODE.value or "").strip() or generate_game_id()
    set_status("connecting...")
    connect_ws(code)


document.getElementById("flip").addEventListener("click", create_proxy(on_flip))
document.getElementById("new").addEventListener("click", create_proxy(on_new))
document.getElementById("undo").addEventListener("click", create_proxy(on_undo))
document.getElementById("load").addEventListener("click", create_proxy(on_load))
document.getElementById("export-fen").addEventListener("click", create_proxy(on_export_fen))
document.getElementById("export-pgn").addEventListener("click", create_proxy(on_export_pgn))
OPEN_BTN.addEventListener("click", create_proxy(on_open))

# ---- Initial connection ----
set_status("connecting...")
connect_ws(generate_game_id())
