"""
Block Sudoku Board Module.

This module implements the game board with:
- 9x9 grid representation split into nine 3x3 sub-squares
- Shape placement validation
- Clear detection (rows, columns and sub-squares)
- Magnetic snapping of hovered positions
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Tuple
import numpy as np
from .shapes import Shape

Cell = Tuple[int, int]

GRID_SIZE = 9
SQUARE_SIZE = 3

# Neighbours tried, in order, when the hovered position is not legal
SNAP_DELTAS: Tuple[Cell, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))


@dataclass(frozen=True)
class ClearResult:
    """Regions that are full on a board."""
    rows: Tuple[int, ...] = ()
    cols: Tuple[int, ...] = ()
    squares: Tuple[Cell, ...] = ()  # top-left corner of each full sub-square
    cleared_cells: FrozenSet[Cell] = field(default_factory=frozenset)

    @property
    def count(self) -> int:
        """Number of full regions; a cell may count towards up to three."""
        return len(self.rows) + len(self.cols) + len(self.squares)


class Board:
    """
    Represents the 9x9 Block Sudoku game board.

    The board is represented as a 2D numpy array where:
    - 0 = empty cell
    - 1 = filled cell
    """

    SIZE = GRID_SIZE

    def __init__(self, grid: Optional[np.ndarray] = None):
        """Initialize an empty board, or one holding a copy of ``grid``."""
        self.size = GRID_SIZE
        if grid is None:
            self.grid = np.zeros((GRID_SIZE, GRID_SIZE), dtype=np.int8)
        else:
            grid = np.asarray(grid, dtype=np.int8)
            if grid.shape != (GRID_SIZE, GRID_SIZE):
                raise ValueError(f"Board grid must be {GRID_SIZE}x{GRID_SIZE}, got {grid.shape}")
            self.grid = grid.copy()

    def copy(self) -> "Board":
        """Create a deep copy of this board."""
        return Board(self.grid)

    @property
    def total_blocks(self) -> int:
        """Return total number of filled cells on the board."""
        return int(self.grid.sum())

    @property
    def empty_cells(self) -> int:
        """Return number of empty cells."""
        return self.size * self.size - self.total_blocks

    def in_bounds(self, row: int, col: int) -> bool:
        """Check if coordinates are within board bounds."""
        return 0 <= row < self.size and 0 <= col < self.size

    def is_filled(self, row: int, col: int) -> bool:
        return self.in_bounds(row, col) and self.grid[row, col] == 1

    def can_place(self, shape: Shape, row: int, col: int) -> bool:
        """
        Check if a shape can be placed at the given position.

        Args:
            shape: The shape to place
            row: Row of the shape's top-left corner
            col: Column of the shape's top-left corner

        Returns:
            True if every occupied cell lands in bounds on an empty cell
        """
        size = self.size
        grid = self.grid
        for dr, dc in shape.blocks:
            r, c = row + dr, col + dc
            if r < 0 or r >= size or c < 0 or c >= size:
                return False
            if grid[r, c] != 0:
                return False
        return True

    def place_shape(self, shape: Shape, row: int, col: int) -> bool:
        """
        Fill the shape's cells on this board.

        Returns:
            True if successful, False (board untouched) if placement is invalid
        """
        if not self.can_place(shape, row, col):
            return False
        for dr, dc in shape.blocks:
            self.grid[row + dr, col + dc] = 1
        return True

    def get_valid_placements(self, shape: Shape) -> List[Cell]:
        """Get all (row, col) positions where the shape can be placed."""
        valid = []
        for row in range(self.size - shape.height + 1):
            for col in range(self.size - shape.width + 1):
                if self.can_place(shape, row, col):
                    valid.append((row, col))
        return valid

    def has_valid_placement(self, shape: Shape) -> bool:
        """Check if there's at least one valid placement for a shape."""
        for row in range(self.size - shape.height + 1):
            for col in range(self.size - shape.width + 1):
                if self.can_place(shape, row, col):
                    return True
        return False

    def detect_clears(self) -> ClearResult:
        """
        Find all full rows, columns and 3x3 sub-squares.

        Each full region counts once towards ``count``; ``cleared_cells`` is
        the union of their cells.
        """
        full = self.grid == 1
        rows = tuple(int(r) for r in range(self.size) if full[r, :].all())
        cols = tuple(int(c) for c in range(self.size) if full[:, c].all())
        squares = tuple(
            (r, c)
            for r in range(0, self.size, SQUARE_SIZE)
            for c in range(0, self.size, SQUARE_SIZE)
            if full[r:r + SQUARE_SIZE, c:c + SQUARE_SIZE].all()
        )

        cells = set()
        for r in rows:
            cells.update((r, c) for c in range(self.size))
        for c in cols:
            cells.update((r, c) for r in range(self.size))
        for r, c in squares:
            cells.update(
                (r + i, c + j) for i in range(SQUARE_SIZE) for j in range(SQUARE_SIZE)
            )

        return ClearResult(rows, cols, squares, frozenset(cells))

    def clear_cells(self, cells: Iterable[Cell]) -> int:
        """
        Empty the given cells.

        Returns:
            Number of cells that were filled before clearing
        """
        cleared = 0
        for r, c in cells:
            if self.grid[r, c] == 1:
                cleared += 1
            self.grid[r, c] = 0
        return cleared

    def get_state(self) -> np.ndarray:
        """Get the board state as a numpy array."""
        return self.grid.copy()

    def to_list(self) -> List[List[int]]:
        return self.grid.tolist()

    def to_tensor(self) -> np.ndarray:
        """Convert board to a float array for observation output."""
        return self.grid.astype(np.float32)

    def __str__(self) -> str:
        """Create a string visualization of the board with sub-square borders."""
        def with_dividers(items: List[str]) -> str:
            groups = [items[i:i + SQUARE_SIZE] for i in range(0, len(items), SQUARE_SIZE)]
            return " | ".join(" ".join(group) for group in groups)

        lines = ["   " + with_dividers([str(c) for c in range(self.size)])]
        for row in range(self.size):
            if row and row % SQUARE_SIZE == 0:
                lines.append("   " + "-" * (self.size * 2 + 3))
            cells = ["█" if self.grid[row, col] == 1 else "·" for col in range(self.size)]
            lines.append(f"{row}| " + with_dividers(cells))
        lines.append(f"Blocks: {self.total_blocks}, Empty: {self.empty_cells}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"Board(blocks={self.total_blocks})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return False
        return np.array_equal(self.grid, other.grid)

    def __hash__(self) -> int:
        return hash(self.grid.tobytes())


def can_place(shape: Shape, row: int, col: int, board: Board) -> bool:
    """Functional form of :meth:`Board.can_place`."""
    return board.can_place(shape, row, col)


def has_any_placement(shapes: Iterable[Shape], board: Board) -> bool:
    """Check whether at least one of the shapes fits anywhere on the board."""
    return any(board.has_valid_placement(shape) for shape in shapes)


def snap_position(shape: Shape, row: int, col: int, board: Board) -> Optional[Cell]:
    """
    Resolve a hovered position to a legal one.

    The exact position is preferred; otherwise the four orthogonal
    neighbours are tried in a fixed order.

    Returns:
        The (row, col) to preview, or None if no nearby position is legal
    """
    if board.can_place(shape, row, col):
        return row, col
    for dr, dc in SNAP_DELTAS:
        if board.can_place(shape, row + dr, col + dc):
            return row + dr, col + dc
    return None


if __name__ == "__main__":
    from .shapes import get_shape_by_id

    board = Board()
    line = get_shape_by_id("line-3-0")
    for col in (0, 3, 6):
        board.place_shape(line, 0, col)
    print(board)
    result = board.detect_clears()
    print(f"\nFull regions: {result.count}, cells: {len(result.cleared_cells)}")
    board.clear_cells(result.cleared_cells)
    print(board)
