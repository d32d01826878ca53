"""Line clear scoring, level progression and the gravity curve."""

import math

from blockfall_core.difficulty import DifficultyConfig

# Original Nintendo line clear awards, indexed by lines cleared at once
LINE_SCORES = (0, 40, 100, 300, 1200)

MIN_INTERVAL_MS = 50


def calculate_score(lines_cleared: int, level: int = 1, multiplier: float = 1.0) -> int:
    """Calculate score from lines cleared.

    Args:
        lines_cleared: Number of lines cleared simultaneously (0-4)
        level: Current level
        multiplier: Difficulty score multiplier

    Returns:
        Score points, floored to an integer
    """
    if not 0 <= lines_cleared < len(LINE_SCORES):
        return 0
    return math.floor(LINE_SCORES[lines_cleared] * level * multiplier)


def level_for_lines(lines_total: int, lines_per_level: int) -> int:
    """Level reached after clearing lines_total lines (levels start at 1)."""
    return lines_total // lines_per_level + 1


def gravity_interval_ms(
    level: int, config: DifficultyConfig, min_interval_ms: int = MIN_INTERVAL_MS
) -> int:
    """Milliseconds between automatic drops at the given level.

    Args:
        level: Current level (1-based)
        config: Difficulty tuning
        min_interval_ms: Lower bound for the interval

    Returns:
        Gravity interval in milliseconds
    """
    interval = config.base_interval_ms - (level - 1) * config.interval_decrease_ms
    return max(min_interval_ms, interval)
