"""
Tests for shape definitions and the rotation catalog.
"""
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blockdoku.shapes import (
    ALL_SHAPES, BASE_SHAPES, SHAPE_POOLS, Shape, build_catalog,
    get_pool, get_shape_by_id, rotate_matrix, visualize_shape,
)


class TestRotation:
    """Test matrix rotation."""

    def test_rotate_line(self):
        """A horizontal line becomes vertical."""
        assert rotate_matrix([[1, 1, 1]]) == ((1,), (1,), (1,))

    def test_rotate_clockwise(self):
        """Rotation is clockwise: result[c][N-1-r] = source[r][c]."""
        matrix = [[1, 0, 0], [1, 1, 1]]
        assert rotate_matrix(matrix) == ((1, 1), (1, 0), (1, 0))

    def test_rotate_dimensions(self):
        """An N x M matrix becomes M x N."""
        rotated = rotate_matrix([[1, 1, 1, 1], [0, 0, 0, 1]])
        assert len(rotated) == 4
        assert len(rotated[0]) == 2

    @pytest.mark.parametrize("base", sorted(BASE_SHAPES))
    def test_four_rotations_are_identity(self, base):
        """Rotating any base shape four times gives it back."""
        matrix = BASE_SHAPES[base]
        current = matrix
        for _ in range(4):
            current = rotate_matrix(current)
        assert current == matrix

    def test_rotate_does_not_modify_input(self):
        matrix = [[1, 0], [1, 1]]
        rotate_matrix(matrix)
        assert matrix == [[1, 0], [1, 1]]


class TestShape:
    """Test the Shape value type."""

    def test_blocks(self):
        shape = get_shape_by_id("l-small-0")
        assert shape.blocks == ((0, 0), (1, 0), (1, 1))
        assert shape.num_blocks == 3
        assert shape.height == 2
        assert shape.width == 2

    def test_empty_matrix_rejected(self):
        with pytest.raises(ValueError):
            Shape("bad", "dot", ())

    def test_ragged_matrix_rejected(self):
        with pytest.raises(ValueError):
            Shape("bad", "dot", ((1, 1), (1,)))

    def test_rotated_keeps_identity(self):
        """Rotating a tray shape keeps its id and uid."""
        shape = get_shape_by_id("line-3-0").with_uid(7)
        rotated = shape.rotated()
        assert rotated.id == "line-3-0"
        assert rotated.uid == 7
        assert rotated.matrix == ((1,), (1,), (1,))
        # Original is untouched
        assert shape.matrix == ((1, 1, 1),)

    def test_to_mask(self):
        mask = get_shape_by_id("square-0").to_mask(9)
        assert mask.shape == (9, 9)
        assert mask.dtype == np.float32
        assert mask.sum() == 4
        assert mask[1, 1] == 1.0

    def test_visualize(self):
        assert visualize_shape(get_shape_by_id("line-2-0")) == "□□"


class TestCatalog:
    """Test the generated catalog of rotation variants."""

    def test_base_shape_count(self):
        assert len(BASE_SHAPES) == 15

    def test_catalog_size(self):
        """Duplicate rotations are dropped, leaving 34 variants."""
        assert len(ALL_SHAPES) == 34

    def test_matrices_unique(self):
        matrices = [shape.matrix for shape in ALL_SHAPES]
        assert len(set(matrices)) == len(matrices)

    def test_variant_ids(self):
        ids = {shape.id for shape in ALL_SHAPES}
        assert "dot-0" in ids
        assert "dot-1" not in ids
        assert {"line-3-0", "line-3-1"} <= ids
        assert "line-3-2" not in ids
        assert {"t-shape-0", "t-shape-1", "t-shape-2", "t-shape-3"} <= ids

    def test_corner_is_rotation_of_l_small(self):
        """The corner shape duplicates an l-small rotation and adds no variant."""
        assert not any(shape.base == "corner" for shape in ALL_SHAPES)
        assert get_shape_by_id("l-small-1").matrix == BASE_SHAPES["corner"]

    def test_build_catalog_first_wins(self):
        catalog = build_catalog({"a": ((1, 1),), "b": ((1,), (1,))})
        assert [shape.id for shape in catalog] == ["a-0", "a-1"]

    def test_unknown_shape(self):
        with pytest.raises(ValueError):
            get_shape_by_id("pentagon-0")


class TestPools:
    """Test tier pools."""

    def test_pool_sizes(self):
        assert len(SHAPE_POOLS[1]) == 10
        assert len(SHAPE_POOLS[2]) == 20
        assert len(SHAPE_POOLS[3]) == 34

    def test_pools_nested(self):
        assert set(SHAPE_POOLS[1]) <= set(SHAPE_POOLS[2]) <= set(SHAPE_POOLS[3])

    def test_easy_pool_bases(self):
        bases = {shape.base for shape in get_pool(1)}
        assert bases == {"dot", "line-2", "line-3", "square", "l-small"}

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            get_pool(4)
