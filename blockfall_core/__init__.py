"""Blockfall game engine.

Exports the core engine and supporting classes:
- Board: Grid representation, collision and line clearing
- Piece: Tetromino with shape matrix and anchor
- Game: State machine tying pieces, scoring and gravity together
- ScoreStore: Per-difficulty high score lists
"""

from .board import Board
from .piece import Piece, PIECE_TYPES, rotate_clockwise
from .difficulty import Difficulty, DifficultyConfig
from .config import EngineConfig
from .scheduler import AsyncioDropScheduler, DropScheduler, ManualDropScheduler
from .game import Command, Game, GameSnapshot, GameStatus, GameSummary
from .scores import ScoreEntry, ScoreStore

__all__ = [
    "Board",
    "Piece",
    "PIECE_TYPES",
    "rotate_clockwise",
    "Difficulty",
    "DifficultyConfig",
    "EngineConfig",
    "AsyncioDropScheduler",
    "DropScheduler",
    "ManualDropScheduler",
    "Command",
    "Game",
    "GameSnapshot",
    "GameStatus",
    "GameSummary",
    "ScoreEntry",
    "ScoreStore",
]
