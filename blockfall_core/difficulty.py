"""Difficulty presets.

A difficulty fixes the gravity curve, how many lines make a level and the
score multiplier for the whole session.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Difficulty(str, Enum):
    """Selectable difficulty levels."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class DifficultyConfig:
    """Tuning values for one difficulty."""
    base_interval_ms: int       # Gravity interval at level 1
    interval_decrease_ms: int   # Interval reduction per level gained
    lines_per_level: int        # Lines needed for each level up
    score_multiplier: float     # Applied to every line clear award


DIFFICULTY_CONFIGS: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(800, 50, 10, 1.0),
    Difficulty.MEDIUM: DifficultyConfig(500, 50, 8, 1.5),
    Difficulty.HARD: DifficultyConfig(300, 50, 6, 2.0),
}


def parse_difficulty(value: Union[str, Difficulty]) -> Difficulty:
    """Convert a difficulty name to a Difficulty.

    Raises:
        ValueError: If the name is not a known difficulty
    """
    try:
        return Difficulty(value)
    except ValueError:
        raise ValueError(f"Unknown difficulty: {value}")


def get_difficulty_config(value: Union[str, Difficulty]) -> DifficultyConfig:
    return DIFFICULTY_CONFIGS[parse_difficulty(value)]
