import chess

from chessboard.oracle import ChessGame


def test_legal_move_updates_state():
    game = ChessGame()

    # Starting position: e2e4 is legal
    record = game.attempt_move("e2", "e4")
    assert record is not None
    assert (record.from_square, record.to_square) == ("e2", "e4")
    assert record.piece == "P"
    assert record.color == "white"
    assert record.san == "e4"
    assert record.flags == "b"
    assert record.captured is None

    # after white moves, black to move
    assert game.turn() == "black"
    assert game.ply_count() == 1


def test_illegal_move_is_rejected():
    game = ChessGame()

    # e2e5 is illegal (pawn cannot move 3 squares)
    assert game.attempt_move("e2", "e5") is None
    # Board should not have any moves played
    assert len(game.board.move_stack) == 0


def test_bad_squares_are_rejected():
    game = ChessGame()
    assert game.attempt_move("e9", "e4") is None
    assert game.legal_destinations("z1") == set()
    # empty origin
    assert game.legal_destinations("e4") == set()


def test_legal_destinations():
    game = ChessGame()
    assert game.legal_destinations("e2") == {"e3", "e4"}
    assert game.legal_destinations("g1") == {"f3", "h3"}
    # black pieces cannot move on white's turn
    assert game.legal_destinations("e7") == set()


def test_reset_restores_start_position():
    game = ChessGame()
    game.attempt_move("e2", "e4")
    assert len(game.board.move_stack) == 1

    game.reset()
    assert len(game.board.move_stack) == 0
    # FEN of a starting chess position begins with this piece layout
    assert game.current_position().startswith("rnbqkbnr")
    assert game.turn() == "white"


def test_capture_is_recorded():
    game = ChessGame()
    for src, dst in [("e2", "e4"), ("d7", "d5")]:
        game.attempt_move(src, dst)
    record = game.attempt_move("e4", "d5")
    assert record.captured == "p"
    assert "c" in record.flags
    assert record.san == "exd5"


def test_en_passant_is_recorded():
    game = ChessGame()
    for src, dst in [("e2", "e4"), ("a7", "a6"), ("e4", "e5"), ("d7", "d5")]:
        game.attempt_move(src, dst)
    record = game.attempt_move("e5", "d6")
    assert record.captured == "p"
    assert "e" in record.flags
    assert game.board.piece_at(chess.D5) is None


def test_castling_flags():
    game = ChessGame("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    short = game.attempt_move("e1", "g1")
    assert short.flags == "k"
    assert short.san == "O-O"
    long = game.attempt_move("e8", "c8")
    assert long.flags == "q"
    assert long.san == "O-O-O"


def test_promotion_defaults_to_queen():
    game = ChessGame("8/P7/8/8/8/8/8/k6K w - - 0 1")
    record = game.attempt_move("a7", "a8")
    assert record.promotion == "q"
    assert "p" in record.flags
    assert game.board.piece_at(chess.A8).symbol() == "Q"


def test_under_promotion():
    game = ChessGame("8/P7/8/8/8/8/8/k6K w - - 0 1")
    record = game.attempt_move("a7", "a8", promotion="n")
    assert record.promotion == "n"
    assert game.board.piece_at(chess.A8).symbol() == "N"


def test_promotion_without_piece_is_rejected():
    game = ChessGame("8/P7/8/8/8/8/8/k6K w - - 0 1")
    assert game.attempt_move("a7", "a8", promotion=None) is None
    assert game.attempt_move("a7", "a8", promotion="k") is None


def test_undo_returns_the_undone_move():
    game = ChessGame()
    assert game.undo() is None
    game.attempt_move("g1", "f3")
    record = game.undo()
    assert record.san == "Nf3"
    assert game.ply_count() == 0


def test_history_is_verbose_and_ordered():
    game = ChessGame()
    for src, dst in [("e2", "e4"), ("e7", "e5"), ("g1", "f3")]:
        game.attempt_move(src, dst)
    history = game.history_verbose()
    assert [r.san for r in history] == ["e4", "e5", "Nf3"]
    assert [r.color for r in history] == ["white", "black", "white"]


def test_history_starts_from_loaded_position():
    game = ChessGame()
    assert game.load_position("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    game.attempt_move("e8", "g8")
    assert [r.san for r in game.history_verbose()] == ["O-O"]


def test_load_rejects_bad_fen_and_keeps_game():
    game = ChessGame()
    game.attempt_move("e2", "e4")
    before = game.current_position()
    assert not game.load_position("not a fen")
    # no kings: parses but is not a valid position
    assert not game.load_position("8/8/8/8/8/8/8/8 w - - 0 1")
    assert game.current_position() == before
    assert game.ply_count() == 1


def test_terminal_flags():
    game = ChessGame()
    for src, dst in [("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")]:
        game.attempt_move(src, dst)
    assert game.is_check()
    assert game.is_checkmate()
    assert not game.is_draw()
    assert game.is_game_over()


def test_draw_flags():
    stalemate = ChessGame("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert stalemate.is_stalemate() and stalemate.is_draw()

    bare_kings = ChessGame("8/8/8/4k3/8/8/8/4K3 w - - 0 1")
    assert bare_kings.is_insufficient_material() and bare_kings.is_draw()

    fifty = ChessGame("8/8/8/4k3/8/8/8/4K2R w K - 100 80")
    assert fifty.is_draw() and fifty.is_game_over()


def test_threefold_repetition():
    game = ChessGame()
    shuffle = [("g1", "f3"), ("g8", "f6"), ("f3", "g1"), ("f6", "g8")]
    for src, dst in shuffle * 2:
        game.attempt_move(src, dst)
    assert game.is_threefold_repetition()
    assert game.is_draw()


def test_pgn_export():
    game = ChessGame()
    game.attempt_move("e2", "e4")
    game.attempt_move("e7", "e5")
    pgn = game.pgn()
    assert "1. e4 e5" in pgn
