"""
Tests for the placement validator.
"""

import pytest

from brkga_packer.algorithms.validator import validate_placements
from brkga_packer.core.config import BinSpec, PackerConfig
from brkga_packer.core.errors import OutOfBoundsError, OverlapError, PlacementError
from brkga_packer.core.models import PlacedItem, expand_items


@pytest.fixture
def config():
    return PackerConfig(bin=BinSpec(width=4, depth=4, height=4))


def placed(box_id, x, y, z, w=2, d=2, h=2, bin_index=0):
    return PlacedItem(box_id=box_id, bin_index=bin_index, x=x, y=y, z=z,
                      width=w, depth=d, height=h, orientation=0)


class TestValidPlacements:
    def test_empty(self, config):
        assert validate_placements([], config)

    def test_touching_boxes(self, config):
        items = [placed(0, 0, 0, 0), placed(1, 2, 0, 0), placed(2, 0, 2, 0), placed(3, 0, 0, 2)]
        assert validate_placements(items, config)

    def test_same_position_in_different_bins(self, config):
        items = [placed(0, 0, 0, 0, bin_index=0), placed(1, 0, 0, 0, bin_index=1)]
        assert validate_placements(items, config)


class TestViolations:
    @pytest.mark.parametrize("x, y, z", [(3, 0, 0), (0, 3, 0), (0, 0, 3), (-1, 0, 0)])
    def test_out_of_bounds(self, config, x, y, z):
        with pytest.raises(OutOfBoundsError):
            validate_placements([placed(0, x, y, z)], config)

    @pytest.mark.parametrize("w, d, h", [(2, -1, 2), (0, 2, 2), (2, 2, 0)])
    def test_non_positive_extent(self, config, w, d, h):
        with pytest.raises(OutOfBoundsError, match="non-positive"):
            validate_placements([placed(0, 1, 1, 1, w=w, d=d, h=h)], config)

    def test_overlap(self, config):
        with pytest.raises(OverlapError, match="overlaps"):
            validate_placements([placed(0, 0, 0, 0), placed(1, 1, 1, 1)], config)

    def test_duplicate_box(self, config):
        with pytest.raises(PlacementError, match="more than once"):
            validate_placements([placed(0, 0, 0, 0), placed(0, 2, 2, 2)], config)

    def test_foreign_dimensions(self, config):
        boxes = expand_items([(1, 1, 1, 1)])
        with pytest.raises(PlacementError, match="rotation"):
            validate_placements([placed(0, 0, 0, 0)], config, boxes)

    def test_errors_share_a_base(self):
        assert issubclass(OutOfBoundsError, PlacementError)
        assert issubclass(OverlapError, PlacementError)
