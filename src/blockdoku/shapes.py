"""
Block Sudoku Shape Definitions.

This module defines the 15 base polyominoes of the game and the catalog of
all their distinct rotations. Each shape is a rectangular 0/1 matrix; the
catalog is generated once at import time and never modified afterwards.
"""
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

Matrix = Tuple[Tuple[int, ...], ...]


def _to_matrix(rows: Sequence[Sequence[int]]) -> Matrix:
    """Normalize nested sequences into an immutable 0/1 matrix."""
    return tuple(tuple(1 if cell else 0 for cell in row) for row in rows)


def rotate_matrix(matrix: Sequence[Sequence[int]]) -> Matrix:
    """
    Rotate a matrix 90 degrees clockwise.

    An N x M matrix becomes M x N with ``result[c][N-1-r] = source[r][c]``.
    """
    n = len(matrix)
    m = len(matrix[0])
    rotated = [[0] * n for _ in range(m)]
    for r in range(n):
        for c in range(m):
            rotated[c][n - 1 - r] = matrix[r][c]
    return _to_matrix(rotated)


@dataclass(frozen=True)
class Shape:
    """A polyomino, optionally tagged with the uid of its tray slot."""
    id: str
    base: str
    matrix: Matrix
    uid: Optional[int] = None

    def __post_init__(self):
        if not self.matrix or not self.matrix[0]:
            raise ValueError(f"Shape {self.id} has an empty matrix")
        width = len(self.matrix[0])
        if any(len(row) != width for row in self.matrix):
            raise ValueError(f"Shape {self.id} has a ragged matrix")

    @property
    def blocks(self) -> Tuple[Tuple[int, int], ...]:
        """Occupied (row, col) offsets from the top-left corner."""
        return tuple(
            (r, c)
            for r, row in enumerate(self.matrix)
            for c, cell in enumerate(row)
            if cell
        )

    @property
    def num_blocks(self) -> int:
        """Return the number of occupied cells."""
        return sum(sum(row) for row in self.matrix)

    @property
    def height(self) -> int:
        return len(self.matrix)

    @property
    def width(self) -> int:
        return len(self.matrix[0])

    def rotated(self) -> "Shape":
        """Return a new shape rotated 90 degrees clockwise, keeping id and uid."""
        return replace(self, matrix=rotate_matrix(self.matrix))

    def with_uid(self, uid: int) -> "Shape":
        """Return a copy of this shape tagged with a tray uid."""
        return replace(self, uid=uid)

    def get_shape_array(self) -> np.ndarray:
        """Get the matrix as an int8 numpy array."""
        return np.array(self.matrix, dtype=np.int8)

    def to_mask(self, board_size: int = 9) -> np.ndarray:
        """Convert the shape to a binary mask on a board-sized grid (placed at origin)."""
        mask = np.zeros((board_size, board_size), dtype=np.float32)
        for r, c in self.blocks:
            if r < board_size and c < board_size:
                mask[r, c] = 1.0
        return mask

    def __repr__(self) -> str:
        uid = f", uid={self.uid}" if self.uid is not None else ""
        return f"Shape({self.id}, {self.num_blocks} blocks{uid})"


# =============================================================================
# BASE SHAPES
# =============================================================================

BASE_SHAPES: Dict[str, Matrix] = {
    "dot": _to_matrix([[1]]),
    "line-2": _to_matrix([[1, 1]]),
    "line-3": _to_matrix([[1, 1, 1]]),
    "line-4": _to_matrix([[1, 1, 1, 1]]),
    "line-5": _to_matrix([[1, 1, 1, 1, 1]]),
    "square": _to_matrix([[1, 1], [1, 1]]),
    "l-small": _to_matrix([[1, 0], [1, 1]]),
    "l-big": _to_matrix([[1, 0, 0], [1, 1, 1]]),
    "j-big": _to_matrix([[0, 0, 1], [1, 1, 1]]),
    "t-shape": _to_matrix([[0, 1, 0], [1, 1, 1]]),
    "s-shape": _to_matrix([[0, 1, 1], [1, 1, 0]]),
    "z-shape": _to_matrix([[1, 1, 0], [0, 1, 1]]),
    "corner": _to_matrix([[1, 1], [1, 0]]),
    "diagonal-2": _to_matrix([[1, 0], [0, 1]]),
    "diagonal-3": _to_matrix([[1, 0, 0], [0, 1, 0], [0, 0, 1]]),
}

assert len(BASE_SHAPES) == 15, f"Expected 15 base shapes, got {len(BASE_SHAPES)}"

SHAPE_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "EASY": ("dot", "line-2", "line-3", "square", "l-small", "corner"),
    "MEDIUM": ("line-4", "t-shape", "s-shape", "z-shape"),
    "HARD": ("line-5", "l-big", "j-big", "diagonal-3", "diagonal-2"),
}


def build_catalog(base_shapes: Dict[str, Matrix]) -> Tuple[Shape, ...]:
    """
    Build the catalog of all distinct rotations of the given base shapes.

    Each base shape is rotated up to four times; a variant is kept only if no
    shape already in the catalog has a structurally equal matrix. Kept variants
    are tagged ``{base}-{rotationIndex}``.
    """
    catalog: List[Shape] = []
    seen = set()
    for base, matrix in base_shapes.items():
        current = matrix
        for rotation in range(4):
            if current not in seen:
                seen.add(current)
                catalog.append(Shape(f"{base}-{rotation}", base, current))
            current = rotate_matrix(current)
    return tuple(catalog)


ALL_SHAPES: Tuple[Shape, ...] = build_catalog(BASE_SHAPES)
SHAPES_BY_ID: Dict[str, Shape] = {shape.id: shape for shape in ALL_SHAPES}


def _pool_for(bases: Sequence[str]) -> Tuple[Shape, ...]:
    wanted = set(bases)
    return tuple(shape for shape in ALL_SHAPES if shape.base in wanted)


# Tier-indexed pools, growing in complexity with the tier level
SHAPE_POOLS: Dict[int, Tuple[Shape, ...]] = {
    1: _pool_for(SHAPE_CATEGORIES["EASY"]),
    2: _pool_for(SHAPE_CATEGORIES["EASY"] + SHAPE_CATEGORIES["MEDIUM"]),
    3: ALL_SHAPES,
}


def get_shape_by_id(shape_id: str) -> Shape:
    """Get a catalog shape by its variant id (e.g. ``"line-3-1"``)."""
    if shape_id not in SHAPES_BY_ID:
        raise ValueError(f"Unknown shape: {shape_id}")
    return SHAPES_BY_ID[shape_id]


def get_pool(level: int) -> Tuple[Shape, ...]:
    """Get the shape pool for a difficulty level."""
    if level not in SHAPE_POOLS:
        raise ValueError(f"Unknown difficulty level: {level}")
    return SHAPE_POOLS[level]


def visualize_shape(shape: Shape) -> str:
    """Create a string visualization of a shape."""
    return "\n".join(
        "".join("□" if cell else " " for cell in row) for row in shape.matrix
    )


if __name__ == "__main__":
    print(f"Catalog size: {len(ALL_SHAPES)}")
    for level, pool in SHAPE_POOLS.items():
        print(f"Tier {level}: {len(pool)} shapes")
    print("-" * 40)
    for shape in ALL_SHAPES:
        print(f"\n{shape.id} ({shape.num_blocks} blocks, {shape.width}x{shape.height}):")
        print(visualize_shape(shape))
