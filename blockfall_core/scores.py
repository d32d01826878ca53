"""High score persistence.

Scores are kept per difficulty, best first, at most MAX_ENTRIES each, and
stored as one JSON document. Storage problems are logged and never raised.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from blockfall_core.difficulty import Difficulty, parse_difficulty
from blockfall_core.game import GameSummary

logger = logging.getLogger(__name__)

MAX_ENTRIES = 10


@dataclass
class ScoreEntry:
    """One recorded game result."""
    score: int
    level: int
    lines: int
    timestamp: str  # ISO-8601, UTC


def _empty_table() -> Dict[str, List[ScoreEntry]]:
    return {d.value: [] for d in Difficulty}


class ScoreStore:
    """Best-score lists keyed by difficulty."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize the store.

        Args:
            path: JSON file to persist to (None = keep scores in memory only)
        """
        self.path = Path(path) if path is not None else None
        self._scores = self._load()

    def _load(self) -> Dict[str, List[ScoreEntry]]:
        table = _empty_table()
        if self.path is None or not self.path.exists():
            return table

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            for key, entries in data.items():
                if key not in table:
                    continue
                table[key] = [ScoreEntry(**entry) for entry in entries][:MAX_ENTRIES]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"[Scores] Failed to load high scores from {self.path}: {e}")
            return _empty_table()

        return table

    def _persist(self) -> None:
        if self.path is None:
            return

        data = {key: [asdict(e) for e in entries] for key, entries in self._scores.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"[Scores] Failed to save high scores to {self.path}: {e}")

    def save(
        self,
        difficulty: Union[str, Difficulty],
        score: int,
        level: int = 1,
        lines: int = 0,
    ) -> ScoreEntry:
        """Record a result and keep only the best MAX_ENTRIES.

        Args:
            difficulty: Difficulty the game was played on
            score: Final score
            level: Final level
            lines: Total lines cleared

        Returns:
            The recorded entry
        """
        key = parse_difficulty(difficulty).value
        entry = ScoreEntry(
            score=score,
            level=level,
            lines=lines,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

        entries = self._scores[key]
        entries.append(entry)
        entries.sort(key=lambda e: e.score, reverse=True)
        del entries[MAX_ENTRIES:]

        self._persist()
        logger.info(f"[Scores] Saved {score} for {key}")
        return entry

    def record(self, summary: GameSummary) -> ScoreEntry:
        """Record a finished game (usable as a game-over listener)."""
        return self.save(summary.difficulty, summary.score, summary.level, summary.lines)

    def get_scores(self, difficulty: Union[str, Difficulty]) -> List[ScoreEntry]:
        key = parse_difficulty(difficulty).value
        return list(self._scores[key])

    def get_all(self) -> Dict[str, List[ScoreEntry]]:
        return {key: list(entries) for key, entries in self._scores.items()}

    def clear(self) -> None:
        """Remove all recorded scores, including the backing file."""
        self._scores = _empty_table()
        if self.path is None:
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"[Scores] Failed to clear high scores at {self.path}: {e}")
