"""Piece randomizers.

UniformRNG picks each piece independently. SevenBagRNG shuffles all seven
pieces into a bag, deals them out, then reshuffles for the next bag, which
bounds droughts of any single piece.
"""

import random
from typing import List, Optional

from blockfall_core.piece import PIECE_TYPES


class UniformRNG:
    """Uniform random piece generator."""

    PIECES = list(PIECE_TYPES)

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = random.Random(seed)

    def next(self) -> str:
        """Get the next piece type."""
        return self.rng.choice(self.PIECES)

    def reset(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self.rng = random.Random(seed)


class SevenBagRNG:
    """7-bag piece generator."""

    PIECES = list(PIECE_TYPES)

    def __init__(self, seed: Optional[int] = None):
        """Initialize with an optional seed for reproducible sequences.

        Args:
            seed: Random seed (None = seeded from system entropy)
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.bag: List[str] = []
        self._refill_bag()

    def _refill_bag(self) -> None:
        """Shuffle all 7 pieces into the bag."""
        self.bag = self.PIECES.copy()
        self.rng.shuffle(self.bag)

    def next(self) -> str:
        """Get the next piece from the bag.

        Returns:
            Piece type string ("I", "O", "T", "S", "Z", "J", "L")
        """
        if not self.bag:
            self._refill_bag()
        return self.bag.pop()

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the RNG with a new seed.

        Args:
            seed: New random seed
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.bag = []
        self._refill_bag()


RANDOMIZERS = {
    "uniform": UniformRNG,
    "bag": SevenBagRNG,
}


def make_rng(name: str = "uniform", seed: Optional[int] = None):
    """Create a randomizer by name ("uniform" or "bag")."""
    try:
        factory = RANDOMIZERS[name]
    except KeyError:
        raise ValueError(f"Unknown randomizer: {name}")
    return factory(seed)
