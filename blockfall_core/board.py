"""Playfield grid with collision detection and line clearing."""

from typing import List, Sequence

from blockfall_core.piece import Piece


class Board:
    """Fixed-size grid, 10x20 by default."""

    WIDTH = 10
    HEIGHT = 20

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        """Initialize an empty board.

        Args:
            width: Number of columns
            height: Number of rows
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid board size: {width}x{height}")
        self.width = width
        self.height = height
        # rows[y][x]: 0 = empty, 1-7 = piece code
        self.rows: List[List[int]] = [self._empty_row() for _ in range(height)]

    def _empty_row(self) -> List[int]:
        return [0] * self.width

    def get(self, x: int, y: int) -> int:
        """Get cell value at (x, y).

        Args:
            x: Column
            y: Row (0 at top)

        Returns:
            Cell value (0 = empty, >0 = filled)
        """
        if not self.in_bounds(x, y):
            return 1  # Out of bounds treated as solid
        return self.rows[y][x]

    def set(self, x: int, y: int, value: int) -> None:
        """Set cell value at (x, y); out-of-bounds writes are ignored."""
        if self.in_bounds(x, y):
            self.rows[y][x] = value

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def collides(self, piece: Piece) -> bool:
        """Check if a piece collides with the board or boundaries.

        Cells above the top edge (y < 0) only have to respect the side
        walls, so pieces can spawn partially off the board.

        Args:
            piece: The piece to check

        Returns:
            True if collision detected
        """
        for x, y in piece.get_cells():
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y >= 0 and self.rows[y][x] != 0:
                return True
        return False

    def place(self, piece: Piece) -> None:
        """Write a piece's cells onto the board.

        No legality check is made; cells above the board are dropped.

        Args:
            piece: The piece to place
        """
        for x, y in piece.get_cells():
            if y >= 0:
                self.set(x, y, piece.code)

    def clear_full_rows(self) -> int:
        """Remove all complete rows and return how many were removed.

        Rows are scanned bottom to top. After a removal the rows above have
        shifted down, so the same index is checked again.

        Returns:
            Number of rows cleared
        """
        cleared = 0
        y = self.height - 1

        while y >= 0:
            if self.is_row_full(y):
                del self.rows[y]
                self.rows.insert(0, self._empty_row())
                cleared += 1
            else:
                y -= 1

        assert len(self.rows) == self.height
        return cleared

    def is_row_full(self, y: int) -> bool:
        return all(cell != 0 for cell in self.rows[y])

    def copy(self) -> "Board":
        """Create a deep copy of the board."""
        new_board = Board(self.width, self.height)
        new_board.rows = [row.copy() for row in self.rows]
        return new_board

    def to_rows(self) -> List[List[int]]:
        """Export the grid as a list of row lists (for serialization)."""
        return [row.copy() for row in self.rows]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """Create a board from a list of rows.

        Args:
            rows: Row-major cell values; every row must have the same length

        Returns:
            New board
        """
        if not rows:
            raise ValueError("Expected at least one row")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All rows must have the same width")
        board = cls(width, len(rows))
        board.rows = [list(row) for row in rows]
        return board
