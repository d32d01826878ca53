"""Game state machine.

Composes the board, piece controller, scoring and drop scheduler into one
authoritative game object. All mutations go through the public operations,
each of which runs to completion and then notifies listeners once with an
immutable snapshot.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from blockfall_core.board import Board
from blockfall_core.config import EngineConfig
from blockfall_core.difficulty import Difficulty, get_difficulty_config, parse_difficulty
from blockfall_core.piece import Piece, Shape, spawn_piece
from blockfall_core.rng import make_rng
from blockfall_core.rules import RotationRules
from blockfall_core.scheduler import AsyncioDropScheduler, DropScheduler
from blockfall_core.scoring import calculate_score, gravity_interval_ms, level_for_lines

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    """Lifecycle states."""
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class Command(str, Enum):
    """Discrete commands a client can issue."""
    MOVE_LEFT = "moveLeft"
    MOVE_RIGHT = "moveRight"
    MOVE_DOWN = "moveDown"
    ROTATE = "rotate"
    HARD_DROP = "hardDrop"
    PAUSE = "pause"
    RESUME = "resume"
    START = "start"
    RESET = "reset"


@dataclass(frozen=True)
class PieceView:
    """Read-only view of a piece."""
    type: str
    shape: Shape
    x: int
    y: int

    @classmethod
    def of(cls, piece: Piece) -> "PieceView":
        return cls(piece.type, piece.shape, piece.x, piece.y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "shape": [list(row) for row in self.shape],
            "x": self.x,
            "y": self.y,
        }


@dataclass(frozen=True)
class GameSnapshot:
    """Complete, immutable game state."""
    board: Tuple[Tuple[int, ...], ...]
    current: Optional[PieceView]
    next: PieceView
    score: int
    level: int
    lines: int
    status: GameStatus
    difficulty: Difficulty
    interval_ms: int

    @property
    def paused(self) -> bool:
        return self.status == GameStatus.PAUSED

    @property
    def game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for serialization."""
        return {
            "board": {
                "w": len(self.board[0]),
                "h": len(self.board),
                "cells": [list(row) for row in self.board],
            },
            "current": self.current.to_dict() if self.current else None,
            "next": self.next.to_dict(),
            "score": self.score,
            "level": self.level,
            "lines": self.lines,
            "status": self.status.value,
            "paused": self.paused,
            "game_over": self.game_over,
            "difficulty": self.difficulty.value,
            "interval_ms": self.interval_ms,
        }


@dataclass(frozen=True)
class GameSummary:
    """Final result, delivered to game-over listeners."""
    difficulty: Difficulty
    score: int
    level: int
    lines: int


StateListener = Callable[[GameSnapshot], None]
GameOverListener = Callable[[GameSummary], None]


class Game:
    """A single game session."""

    def __init__(
        self,
        difficulty: Union[str, Difficulty] = Difficulty.MEDIUM,
        config: Optional[EngineConfig] = None,
        scheduler: Optional[DropScheduler] = None,
        seed: Optional[int] = None,
    ):
        """Initialize a game in the ready state.

        Args:
            difficulty: "easy", "medium" or "hard"
            config: Engine settings (board size, randomizer, wall kicks)
            scheduler: Drop scheduler (defaults to an asyncio scheduler)
            seed: Randomizer seed (None = unseeded)
        """
        self.difficulty = parse_difficulty(difficulty)
        self.difficulty_config = get_difficulty_config(self.difficulty)
        self.config = config or EngineConfig()

        self.rng = make_rng(self.config.randomizer, seed)
        self.rotation = RotationRules(wall_kicks=self.config.wall_kicks)
        self.scheduler = scheduler or AsyncioDropScheduler()
        self.scheduler.bind(self._on_tick)

        self._state_listeners: List[StateListener] = []
        self._game_over_listeners: List[GameOverListener] = []

        self._init_state()

    def _init_state(self) -> None:
        self.board = Board(self.config.width, self.config.height)
        self.current_piece: Optional[Piece] = self._draw_piece()
        self.next_piece = self._draw_piece()
        self.score = 0
        self.level = 1
        self.lines_total = 0
        self.status = GameStatus.READY

    def _draw_piece(self) -> Piece:
        return spawn_piece(self.rng.next(), self.board.width)

    def on_state_change(self, listener: StateListener) -> Callable[[], None]:
        """Register a snapshot listener.

        Returns:
            A function that unregisters the listener
        """
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def on_game_over(self, listener: GameOverListener) -> Callable[[], None]:
        """Register a game-over listener.

        Returns:
            A function that unregisters the listener
        """
        self._game_over_listeners.append(listener)
        return lambda: self._remove(self._game_over_listeners, listener)

    @staticmethod
    def _remove(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)

    def _notify(self) -> None:
        self._check_invariants()
        snapshot = self.snapshot()
        for listener in list(self._state_listeners):
            listener(snapshot)

    def _check_invariants(self) -> None:
        assert self.score >= 0, f"negative score: {self.score}"
        assert self.level >= 1, f"invalid level: {self.level}"
        assert len(self.board.rows) == self.board.height
        assert all(len(row) == self.board.width for row in self.board.rows)

    @property
    def paused(self) -> bool:
        return self.status == GameStatus.PAUSED

    @property
    def game_over(self) -> bool:
        return self.status == GameStatus.GAME_OVER

    @property
    def interval_ms(self) -> int:
        """Current gravity interval in milliseconds."""
        return gravity_interval_ms(self.level, self.difficulty_config, self.config.min_interval_ms)

    def snapshot(self) -> GameSnapshot:
        """Build an immutable snapshot of the current state."""
        return GameSnapshot(
            board=tuple(tuple(row) for row in self.board.rows),
            current=PieceView.of(self.current_piece) if self.current_piece else None,
            next=PieceView.of(self.next_piece),
            score=self.score,
            level=self.level,
            lines=self.lines_total,
            status=self.status,
            difficulty=self.difficulty,
            interval_ms=self.interval_ms,
        )

    def summary(self) -> GameSummary:
        return GameSummary(self.difficulty, self.score, self.level, self.lines_total)

    def start(self) -> bool:
        """Start the game (ready -> running); resumes a paused game."""
        if self.status == GameStatus.PAUSED:
            return self.resume()
        if self.status != GameStatus.READY:
            return False

        self._schedule()
        self.status = GameStatus.RUNNING
        logger.info(f"[Game] Started: difficulty={self.difficulty.value}, interval={self.interval_ms}ms")
        self._notify()
        return True

    def pause(self) -> bool:
        """Suspend gravity and input. Pausing a paused game is a no-op."""
        if self.status != GameStatus.RUNNING:
            return False

        self.scheduler.stop()
        self.status = GameStatus.PAUSED
        self._notify()
        return True

    def resume(self) -> bool:
        """Resume a paused game at the interval for the current level."""
        if self.status != GameStatus.PAUSED:
            return False

        self._schedule()
        self.status = GameStatus.RUNNING
        self._notify()
        return True

    def reset(self, seed: Optional[int] = None) -> bool:
        """Discard all progress and return to the ready state.

        Args:
            seed: Reseed the randomizer (None keeps the current sequence)
        """
        self.scheduler.stop()
        if seed is not None:
            self.rng.reset(seed)
        self._init_state()
        logger.info("[Game] Reset")
        self._notify()
        return True

    def close(self) -> None:
        """Stop the scheduler and drop all listeners."""
        self.scheduler.stop()
        self._state_listeners.clear()
        self._game_over_listeners.clear()

    def _schedule(self) -> None:
        self.scheduler.start(self.interval_ms)

    def _on_tick(self) -> None:
        if self.status == GameStatus.RUNNING:
            self.move_down()

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def move_down(self) -> bool:
        """Move the piece down one row, locking it if it cannot move.

        Returns:
            True if the piece advanced, False if it locked or the game is
            not running
        """
        if self.status != GameStatus.RUNNING:
            return False

        if self._try_move(0, 1):
            self._notify()
            return True

        self._lock_piece()
        self._publish_lock()
        return False

    def hard_drop(self) -> bool:
        """Drop the piece to its lowest legal row and lock it once."""
        if self.status != GameStatus.RUNNING:
            return False

        while self._try_move(0, 1):
            pass

        self._lock_piece()
        self._publish_lock()
        return True

    def rotate(self) -> bool:
        """Rotate the piece clockwise; rejected if the result collides."""
        if self.status != GameStatus.RUNNING:
            return False

        rotated = self.rotation.try_rotate(self.board, self.current_piece)
        if rotated is None:
            return False

        self.current_piece = rotated
        self._notify()
        return True

    def execute(self, command: Union[str, Command]) -> bool:
        """Apply a command by name.

        Raises:
            ValueError: If the command is unknown
        """
        try:
            command = Command(command)
        except ValueError:
            raise ValueError(f"Invalid command: {command}")

        handlers = {
            Command.MOVE_LEFT: self.move_left,
            Command.MOVE_RIGHT: self.move_right,
            Command.MOVE_DOWN: self.move_down,
            Command.ROTATE: self.rotate,
            Command.HARD_DROP: self.hard_drop,
            Command.PAUSE: self.pause,
            Command.RESUME: self.resume,
            Command.START: self.start,
            Command.RESET: self.reset,
        }
        return handlers[command]()

    def _shift(self, dx: int) -> bool:
        if self.status != GameStatus.RUNNING:
            return False
        if not self._try_move(dx, 0):
            return False
        self._notify()
        return True

    def _try_move(self, dx: int, dy: int) -> bool:
        """Try to move the current piece.

        Returns:
            True if move succeeded
        """
        if not self.current_piece:
            return False

        new_piece = self.current_piece.move(dx, dy)
        if not self.board.collides(new_piece):
            self.current_piece = new_piece
            return True
        return False

    def _lock_piece(self) -> int:
        """Place the current piece, clear rows, score, and spawn the next piece.

        Returns:
            Number of lines cleared
        """
        assert self.current_piece is not None
        piece = self.current_piece

        self.board.place(piece)
        lines_cleared = self.board.clear_full_rows()
        logger.debug(f"[Game] Locked {piece.type} at ({piece.x}, {piece.y}), cleared={lines_cleared}")

        old_level = self.level
        if lines_cleared > 0:
            self.score += calculate_score(
                lines_cleared, self.level, self.difficulty_config.score_multiplier
            )
            self.lines_total += lines_cleared
            self.level = max(
                self.level,
                level_for_lines(self.lines_total, self.difficulty_config.lines_per_level),
            )

        self.current_piece = self.next_piece
        self.next_piece = self._draw_piece()

        if self.board.collides(self.current_piece):
            self.status = GameStatus.GAME_OVER
            self.scheduler.stop()
            logger.info(
                f"[Game] Game over: score={self.score}, level={self.level}, lines={self.lines_total}"
            )
        elif self.level != old_level:
            logger.info(f"[Game] Level up: {old_level} -> {self.level}, interval={self.interval_ms}ms")
            self._schedule()

        return lines_cleared

    def _publish_lock(self) -> None:
        self._notify()
        if self.status == GameStatus.GAME_OVER:
            summary = self.summary()
            for listener in list(self._game_over_listeners):
                listener(summary)
