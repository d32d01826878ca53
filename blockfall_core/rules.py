"""Rotation rules.

Rotation is a clockwise matrix transform around the piece anchor. A rotation
that collides is rejected unless wall kicks are enabled, in which case a few
horizontal offsets are tried first.
"""

from typing import Optional

from blockfall_core.board import Board
from blockfall_core.piece import Piece

# Offsets tried in order when a plain rotation collides. Shapes grow to the
# right of the anchor, so the right wall needs up to three columns of kick.
WALL_KICKS = [(-1, 0), (1, 0), (-2, 0), (2, 0), (-3, 0)]


class RotationRules:
    """Rotation with optional wall kicks."""

    def __init__(self, wall_kicks: bool = False):
        """Initialize rotation rules.

        Args:
            wall_kicks: Whether to try kick offsets when a rotation collides
        """
        self.wall_kicks = wall_kicks

    def try_rotate(self, board: Board, piece: Piece) -> Optional[Piece]:
        """Attempt to rotate a piece clockwise.

        Args:
            board: Current board state
            piece: Piece to rotate

        Returns:
            Rotated piece if successful, None if rotation impossible
        """
        rotated = piece.rotate()

        if not board.collides(rotated):
            return rotated

        if not self.wall_kicks:
            return None

        for dx, dy in WALL_KICKS:
            kicked = rotated.move(dx, dy)
            if not board.collides(kicked):
                return kicked

        return None
