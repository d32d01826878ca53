"""Tests for the game state machine and piece controller."""

import dataclasses

import pytest

from blockfall_core.board import Board
from blockfall_core.config import EngineConfig
from blockfall_core.game import Command, Game, GameStatus
from blockfall_core.piece import PIECE_CODES, Piece, spawn_piece
from blockfall_core.scheduler import ManualDropScheduler


def make_game(difficulty="medium", seed=42, **config):
    scheduler = ManualDropScheduler()
    game = Game(difficulty, config=EngineConfig(**config), scheduler=scheduler, seed=seed)
    return game, scheduler


def started_game(difficulty="medium", seed=42, **config):
    game, scheduler = make_game(difficulty, seed, **config)
    assert game.start()
    return game, scheduler


def record(game):
    snapshots = []
    game.on_state_change(snapshots.append)
    return snapshots


def fill_row(board, y, except_x=None):
    for x in range(board.width):
        if x != except_x:
            board.set(x, y, 1)


def vertical_i(x):
    piece = Piece("I").rotate()
    return Piece("I", x, -3, piece.shape)


def test_new_game_is_ready():
    """Test a new game's initial state."""
    game, scheduler = make_game()
    snapshot = game.snapshot()

    assert snapshot.status == GameStatus.READY
    assert snapshot.score == 0, "Score should start at 0"
    assert snapshot.level == 1, "Level should start at 1"
    assert snapshot.lines == 0, "Lines should start at 0"
    assert snapshot.current is not None and snapshot.next is not None
    assert not snapshot.paused and not snapshot.game_over
    assert all(cell == 0 for row in snapshot.board for cell in row)
    assert not scheduler.running


def test_commands_rejected_before_start():
    game, _ = make_game()
    snapshots = record(game)
    before = game.current_piece

    assert not game.move_left()
    assert not game.move_down()
    assert not game.rotate()
    assert not game.hard_drop()
    assert not game.pause()
    assert game.current_piece == before
    assert snapshots == []


def test_start_begins_gravity():
    game, scheduler = make_game("easy")
    snapshots = record(game)

    assert game.start()
    assert game.status == GameStatus.RUNNING
    assert scheduler.running
    assert scheduler.interval_ms == 800
    assert len(snapshots) == 1

    assert not game.start(), "Starting a running game should be rejected"


def test_failed_start_leaves_game_ready():
    game = Game("easy", config=EngineConfig(), seed=1)  # asyncio scheduler, no running loop
    snapshots = record(game)

    with pytest.raises(RuntimeError):
        game.start()

    assert game.status == GameStatus.READY
    assert not game.scheduler.running
    assert snapshots == []


def test_failed_resume_leaves_game_paused():
    game, _ = started_game()
    game.pause()

    class FailingScheduler(ManualDropScheduler):
        def start(self, interval_ms):
            raise RuntimeError("no event loop")

    game.scheduler = FailingScheduler()
    with pytest.raises(RuntimeError):
        game.resume()

    assert game.status == GameStatus.PAUSED


def test_same_seed_same_pieces():
    game1, _ = make_game(seed=999)
    game2, _ = make_game(seed=999)
    assert game1.current_piece == game2.current_piece
    assert game1.next_piece == game2.next_piece


def test_horizontal_movement():
    """Test basic movement and wall rejection."""
    game, _ = started_game()
    game.current_piece = spawn_piece("O")
    snapshots = record(game)

    assert game.move_right()
    assert game.current_piece.x == 5
    assert game.move_left()
    assert game.current_piece.x == 4

    while game.move_left():
        pass
    assert game.current_piece.x == 0, "Piece should stop at the left wall"
    count = len(snapshots)
    assert not game.move_left()
    assert len(snapshots) == count, "Rejected moves should not notify"


def test_tick_moves_piece_down():
    game, scheduler = started_game()
    y = game.current_piece.y

    assert scheduler.fire()
    assert game.current_piece.y == y + 1


def test_hard_drop_horizontal_i_lands_on_bottom_row():
    game, _ = started_game()
    game.current_piece = spawn_piece("I")
    upcoming = game.next_piece
    snapshots = record(game)

    assert game.hard_drop()

    assert [game.board.get(x, 19) for x in range(3, 7)] == [PIECE_CODES["I"]] * 4
    assert sum(cell != 0 for row in game.board.rows for cell in row) == 4
    assert game.lines_total == 0 and game.score == 0
    assert game.current_piece == upcoming, "Next piece should become current"
    assert game.next_piece is not upcoming
    assert len(snapshots) == 1, "Hard drop should publish exactly one snapshot"


def test_move_down_locks_piece_at_floor():
    game, _ = started_game()
    game.current_piece = Piece("O", 4, 18)
    upcoming = game.next_piece

    assert not game.move_down(), "A blocked move down locks the piece"
    assert game.board.get(4, 19) == PIECE_CODES["O"]
    assert game.board.get(5, 18) == PIECE_CODES["O"]
    assert game.current_piece == upcoming


def test_single_gap_line_clear():
    game, _ = started_game("easy")
    fill_row(game.board, 19, except_x=0)
    game.board.set(5, 18, PIECE_CODES["T"])
    game.current_piece = vertical_i(0)

    assert game.hard_drop()

    assert game.lines_total == 1
    assert game.score == 40
    # I cells at rows 16-18 shift down to rows 17-19
    assert [game.board.get(0, y) for y in (17, 18, 19)] == [PIECE_CODES["I"]] * 3
    assert game.board.get(0, 16) == 0
    assert game.board.get(5, 19) == PIECE_CODES["T"]
    assert game.board.get(5, 18) == 0
    assert all(cell == 0 for cell in game.board.rows[0])
    assert len(game.board.rows) == 20


def test_tetris_scores_with_level_and_multiplier():
    game, _ = started_game("hard")
    for y in range(16, 20):
        fill_row(game.board, y, except_x=9)
    game.current_piece = vertical_i(9)

    game.hard_drop()

    assert game.lines_total == 4
    assert game.score == 1200 * 1 * 2
    assert all(cell == 0 for row in game.board.rows for cell in row)


def test_level_up_restarts_gravity():
    game, scheduler = started_game("medium")
    game.lines_total = 7
    fill_row(game.board, 19, except_x=0)
    game.current_piece = vertical_i(0)

    game.hard_drop()

    assert game.level == 2
    assert game.score == 60, "Clear is scored at the level before the level up"
    assert scheduler.started_intervals == [500, 450]
    assert scheduler.running


def test_level_never_decreases():
    game, _ = started_game("easy")
    game.level = 5
    fill_row(game.board, 19, except_x=0)
    game.current_piece = vertical_i(0)

    game.hard_drop()

    assert game.level == 5
    assert game.score == 40 * 5


def test_rotate():
    game, _ = started_game()
    game.current_piece = Piece("T", 4, 5)
    snapshots = record(game)

    assert game.rotate()
    assert game.current_piece.shape == ((1, 0), (1, 1), (1, 0))
    assert len(snapshots) == 1


def test_rotation_rejected_at_wall():
    game, _ = started_game()
    game.current_piece = Piece("I", 9, 5, vertical_i(0).shape)
    before = game.current_piece

    assert not game.rotate()
    assert game.current_piece == before


def test_rotation_rejected_by_stack():
    game, _ = started_game()
    game.current_piece = Piece("T", 4, 5)
    game.board.set(4, 7, 1)  # cell the rotated T would occupy

    assert not game.rotate()
    assert game.current_piece.shape == ((0, 1, 0), (1, 1, 1))


def test_wall_kick_enhancement():
    game, _ = started_game(wall_kicks=True)
    game.current_piece = Piece("I", 9, 5, vertical_i(0).shape)

    assert game.rotate()
    assert game.current_piece.shape == ((1, 1, 1, 1),)
    assert game.current_piece.x == 6


def test_pause_is_idempotent():
    game, scheduler = started_game()
    snapshots = record(game)

    assert game.pause()
    assert not game.pause(), "Second pause should be a no-op"
    assert len(snapshots) == 1
    assert game.status == GameStatus.PAUSED
    assert not scheduler.running
    assert not scheduler.fire()
    assert not game.move_left(), "Moves are rejected while paused"

    assert game.resume()
    assert not game.resume()
    assert game.status == GameStatus.RUNNING
    assert scheduler.running
    assert len(snapshots) == 2


def test_start_resumes_paused_game():
    game, _ = started_game()
    game.pause()
    assert game.start()
    assert game.status == GameStatus.RUNNING


def test_resume_uses_interval_for_current_level():
    game, scheduler = started_game("hard")
    game.pause()
    game.level = 3
    game.resume()
    assert scheduler.interval_ms == 200


def fill_to_top(board):
    for y in range(board.height):
        fill_row(board, y, except_x=0)


def test_full_board_causes_game_over():
    game, scheduler = started_game()
    fill_to_top(game.board)
    game.current_piece = spawn_piece("T")
    events = []
    game.on_state_change(lambda s: events.append(("state", s.status)))
    game.on_game_over(lambda summary: events.append(("game_over", summary)))

    game.hard_drop()

    assert game.status == GameStatus.GAME_OVER
    assert game.snapshot().game_over
    assert not scheduler.running
    assert events[0] == ("state", GameStatus.GAME_OVER)
    kind, summary = events[1]
    assert kind == "game_over"
    assert summary.score == game.score and summary.difficulty.value == "medium"

    board_before = game.board.to_rows()
    for command in ["moveLeft", "moveRight", "moveDown", "rotate", "hardDrop", "pause", "resume", "start"]:
        assert not game.execute(command), f"{command} should be rejected after game over"
    assert game.board.to_rows() == board_before
    assert len(events) == 2

    assert game.reset()
    assert game.status == GameStatus.READY
    assert game.score == 0
    assert all(cell == 0 for row in game.board.rows for cell in row)


def test_game_over_from_gravity_tick():
    game, scheduler = started_game()
    fill_to_top(game.board)
    game.current_piece = spawn_piece("O")
    results = []
    game.on_game_over(results.append)

    scheduler.fire()

    assert game.game_over
    assert len(results) == 1
    assert not scheduler.fire(), "No ticks after game over"


def test_reset_discards_progress_and_stops_gravity():
    game, scheduler = started_game()
    game.score = 500
    game.level = 3
    game.lines_total = 20
    game.board.set(0, 19, 1)

    assert game.reset(seed=5)

    assert not scheduler.running
    assert (game.score, game.level, game.lines_total) == (0, 1, 0)
    assert game.status == GameStatus.READY
    assert game.board.get(0, 19) == 0

    fresh, _ = make_game(seed=5)
    assert game.current_piece == fresh.current_piece
    assert game.next_piece == fresh.next_piece


def test_snapshot_is_immutable_copy():
    game, _ = started_game()
    snapshot = game.snapshot()

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.score = 100
    with pytest.raises(TypeError):
        snapshot.board[0][0] = 1

    game.board.set(0, 19, 1)
    assert snapshot.board[19][0] == 0, "Snapshot should not track later changes"


def test_snapshot_to_dict():
    game, _ = started_game("hard")
    data = game.snapshot().to_dict()

    assert data["board"]["w"] == 10 and data["board"]["h"] == 20
    assert len(data["board"]["cells"]) == 20
    assert data["status"] == "running"
    assert data["difficulty"] == "hard"
    assert data["interval_ms"] == 300
    assert data["paused"] is False and data["game_over"] is False
    assert set(data["current"]) == {"type", "shape", "x", "y"}


def test_execute_dispatch():
    game, _ = make_game()
    assert game.execute(Command.START)
    assert game.execute("pause")
    assert game.execute("resume")
    with pytest.raises(ValueError):
        game.execute("teleport")


def test_unsubscribe_and_close():
    game, scheduler = started_game()
    snapshots = []
    unsubscribe = game.on_state_change(snapshots.append)

    game.move_down()
    unsubscribe()
    game.move_down()
    assert len(snapshots) == 1

    game.on_state_change(snapshots.append)
    game.close()
    assert not scheduler.running
    game.reset()
    assert len(snapshots) == 1, "Closed games should not notify"


def test_invalid_difficulty():
    with pytest.raises(ValueError):
        Game("impossible", scheduler=ManualDropScheduler())


def test_bag_randomizer_deals_every_piece():
    game, _ = started_game(randomizer="bag", seed=3)
    seen = [game.current_piece.type, game.next_piece.type]
    for _ in range(5):
        game.current_piece = Piece("I", 0, 0)  # placed far from the spawn columns
        game.board = Board()
        game.hard_drop()
        seen.append(game.next_piece.type)
    assert sorted(seen) == ["I", "J", "L", "O", "S", "T", "Z"]
