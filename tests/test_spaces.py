"""
Tests for the per-bin empty maximal space arena.
"""

import math

from brkga_packer.algorithms.spaces import BinSpaces
from brkga_packer.core.models import Space


def _as_tuples(spaces):
    return sorted((s.x1, s.y1, s.z1, s.x2, s.y2, s.z2) for s in spaces)


class TestBinSpaces:
    def test_new_bin_is_one_space(self):
        b = BinSpaces(0, (2, 3, 4))
        assert _as_tuples(b.spaces) == [(0, 0, 0, 2, 3, 4)]
        assert b.used_volume == 0

    def test_corner_box_leaves_three_slabs(self):
        b = BinSpaces(0, (2, 2, 2))
        b.allocate(Space(0, 0, 0, 1, 1, 1), min_dimension=1, min_volume=1)
        assert _as_tuples(b.spaces) == [
            (0, 0, 1, 2, 2, 2),
            (0, 1, 0, 2, 2, 2),
            (1, 0, 0, 2, 2, 2),
        ]
        assert b.used_volume == 1

    def test_slabs_smaller_than_remaining_boxes_are_dropped(self):
        b = BinSpaces(0, (2, 2, 2))
        b.allocate(Space(0, 0, 0, 1.5, 2, 2), min_dimension=1, min_volume=1)
        assert b.spaces == []

    def test_last_box_clears_all_spaces(self):
        b = BinSpaces(0, (2, 2, 2))
        b.allocate(Space(0, 0, 0, 1, 1, 1), min_dimension=math.inf, min_volume=math.inf)
        assert b.spaces == []

    def test_full_bin_has_no_space(self):
        b = BinSpaces(0, (1, 1, 1))
        b.allocate(Space(0, 0, 0, 1, 1, 1), min_dimension=0.1, min_volume=0.001)
        assert b.spaces == []

    def test_spaces_never_intersect_placed_box(self):
        b = BinSpaces(0, (4, 4, 4))
        placed = [Space(0, 0, 0, 2, 2, 2), Space(2, 0, 0, 4, 1, 3), Space(0, 2, 0, 1, 4, 4)]
        for occupied in placed:
            b.allocate(occupied, min_dimension=0.5, min_volume=0.1)
        for ems in b.spaces:
            assert not any(ems.intersects(p) for p in placed)

    def test_no_space_contained_in_another(self):
        b = BinSpaces(0, (4, 4, 4))
        b.allocate(Space(0, 0, 0, 2, 2, 2), min_dimension=0.5, min_volume=0.1)
        b.allocate(Space(2, 0, 0, 4, 2, 1), min_dimension=0.5, min_volume=0.1)
        for i, a in enumerate(b.spaces):
            for j, other in enumerate(b.spaces):
                if i != j:
                    assert not a.contains(other)


class TestBestSpace:
    def test_empty_bin_picks_origin(self):
        b = BinSpaces(0, (2, 2, 2))
        assert b.best_space([(0, (1, 1, 1))]) == 0

    def test_box_too_large(self):
        b = BinSpaces(0, (2, 2, 2))
        assert b.best_space([(0, (3, 1, 1))]) is None

    def test_tie_keeps_lowest_index(self):
        b = BinSpaces(0, (2, 2, 2))
        b.allocate(Space(0, 0, 0, 1, 1, 1), min_dimension=1, min_volume=1)
        # All three slabs give the same far-corner distance for a unit cube.
        assert b.best_space([(0, (1, 1, 1))]) == 0

    def test_prefers_space_deepest_from_far_corner(self):
        b = BinSpaces(0, (4, 1, 1))
        b.spaces = [Space(2, 0, 0, 4, 1, 1), Space(0, 0, 0, 2, 1, 1)]
        assert b.best_space([(0, (1, 1, 1))]) == 1

    def test_only_fitting_orientations_count(self):
        b = BinSpaces(0, (3, 1, 1))
        assert b.best_space([(0, (1, 3, 1))]) is None
        assert b.best_space([(0, (1, 3, 1)), (2, (3, 1, 1))]) == 0
