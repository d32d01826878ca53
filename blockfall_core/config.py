"""Engine and server configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from blockfall_core.board import Board
from blockfall_core.rng import RANDOMIZERS
from blockfall_core.scoring import MIN_INTERVAL_MS


@dataclass(frozen=True)
class EngineConfig:
    """Settings that stay fixed for a game session."""
    width: int = Board.WIDTH
    height: int = Board.HEIGHT
    min_interval_ms: int = MIN_INTERVAL_MS
    randomizer: str = "uniform"  # "uniform" or "bag"
    wall_kicks: bool = False

    def __post_init__(self):
        if self.randomizer not in RANDOMIZERS:
            raise ValueError(f"Unknown randomizer: {self.randomizer}")
        if self.min_interval_ms <= 0:
            raise ValueError("min_interval_ms must be positive")


DEFAULT_SCORES_PATH = Path.home() / ".blockfall" / "scores.json"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


@dataclass
class ServerSettings:
    """Server settings, read from BLOCKFALL_* environment variables."""
    scores_path: Optional[Path] = DEFAULT_SCORES_PATH
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from the environment.

        BLOCKFALL_SCORES_PATH set to an empty string keeps scores in memory.
        """
        settings = cls()
        scores_path = os.getenv("BLOCKFALL_SCORES_PATH")
        if scores_path is not None:
            settings.scores_path = Path(scores_path).expanduser() if scores_path else None
        settings.host = os.getenv("BLOCKFALL_HOST", settings.host)
        port = os.getenv("BLOCKFALL_PORT")
        if port:
            settings.port = int(port)
        origins = os.getenv("BLOCKFALL_CORS_ORIGINS")
        if origins:
            settings.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]
        return settings
