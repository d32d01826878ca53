"""Tetromino piece definitions and rotation logic.

Each piece type has one canonical shape matrix. Rotation states are not
stored; they are computed by rotating the whole matrix clockwise.
Coordinates are relative to the piece's anchor (top-left of the matrix).
"""

from typing import List, Optional, Tuple

# Type alias for a shape matrix (rows of 0/1 cells)
Shape = Tuple[Tuple[int, ...], ...]

PIECE_TYPES = ("I", "O", "T", "S", "Z", "J", "L")

# Board cell value written when a piece locks (0 = empty)
PIECE_CODES: dict[str, int] = {t: i + 1 for i, t in enumerate(PIECE_TYPES)}

# Canonical (spawn) matrices
PIECE_SHAPES: dict[str, Shape] = {
    "I": ((1, 1, 1, 1),),
    "O": ((1, 1),
          (1, 1)),
    "T": ((0, 1, 0),
          (1, 1, 1)),
    "S": ((0, 1, 1),
          (1, 1, 0)),
    "Z": ((1, 1, 0),
          (0, 1, 1)),
    "J": ((1, 0, 0),
          (1, 1, 1)),
    "L": ((0, 0, 1),
          (1, 1, 1)),
}


def rotate_clockwise(shape: Shape) -> Shape:
    """Rotate an R x C matrix clockwise into a C x R matrix.

    Output cell (j, R-1-i) takes the value of input cell (i, j).

    Args:
        shape: Matrix to rotate

    Returns:
        Rotated matrix
    """
    rows = len(shape)
    cols = len(shape[0])
    rotated = [[0] * rows for _ in range(cols)]
    for i in range(rows):
        for j in range(cols):
            rotated[j][rows - 1 - i] = shape[i][j]
    return tuple(tuple(row) for row in rotated)


class Piece:
    """A tetromino with a shape matrix at a board anchor.

    Pieces are treated as values: move() and rotate() return new pieces.
    """

    def __init__(self, piece_type: str, x: int = 0, y: int = 0, shape: Optional[Shape] = None):
        """Initialize a piece.

        Args:
            piece_type: One of "I", "O", "T", "S", "Z", "J", "L"
            x: Board column of the anchor
            y: Board row of the anchor (0 at top, may be negative above the board)
            shape: Shape matrix (defaults to the canonical shape)
        """
        if piece_type not in PIECE_SHAPES:
            raise ValueError(f"Invalid piece type: {piece_type}")
        self.type = piece_type
        self.x = x
        self.y = y
        self.shape: Shape = shape if shape is not None else PIECE_SHAPES[piece_type]

    @property
    def code(self) -> int:
        return PIECE_CODES[self.type]

    @property
    def width(self) -> int:
        return len(self.shape[0])

    @property
    def height(self) -> int:
        return len(self.shape)

    def get_cells(self) -> List[Tuple[int, int]]:
        """Get absolute board coordinates of all occupied cells.

        Returns:
            List of (x, y) tuples in board coordinates
        """
        return [
            (self.x + dx, self.y + dy)
            for dy, row in enumerate(self.shape)
            for dx, filled in enumerate(row)
            if filled
        ]

    def move(self, dx: int, dy: int) -> "Piece":
        """Return a new piece moved by the given delta."""
        return Piece(self.type, self.x + dx, self.y + dy, self.shape)

    def rotate(self) -> "Piece":
        """Return a new piece rotated clockwise around the same anchor."""
        return Piece(self.type, self.x, self.y, rotate_clockwise(self.shape))

    def copy(self) -> "Piece":
        return Piece(self.type, self.x, self.y, self.shape)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (self.type, self.x, self.y, self.shape) == (other.type, other.x, other.y, other.shape)

    def __repr__(self) -> str:
        return f"Piece({self.type}, x={self.x}, y={self.y}, shape={self.shape})"


def get_spawn_position(piece_type: str, board_width: int = 10) -> Tuple[int, int]:
    """Get the spawn anchor for a piece type.

    The piece is horizontally centered and raised so that its bottom-most
    occupied row lands on board row 0.

    Args:
        piece_type: One of "I", "O", "T", "S", "Z", "J", "L"
        board_width: Number of board columns

    Returns:
        (x, y) spawn coordinates
    """
    shape = PIECE_SHAPES[piece_type]
    bottom = max(i for i, row in enumerate(shape) if any(row))
    return ((board_width - len(shape[0])) // 2, -bottom)


def spawn_piece(piece_type: str, board_width: int = 10) -> Piece:
    """Create a piece of the given type at its spawn position."""
    x, y = get_spawn_position(piece_type, board_width)
    return Piece(piece_type, x, y)
