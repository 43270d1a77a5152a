"""Shared fixtures for the brkga-packer test-suite."""

import os
import sys

import pytest

# Make the src/ layout importable without an installed package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from brkga_packer.core.config import BinSpec, DecodingMode, PackerConfig, RotationMode
from brkga_packer.core.models import expand_items


@pytest.fixture
def cube_bin():
    """A 2 x 2 x 2 bin."""
    return BinSpec(width=2, depth=2, height=2)


@pytest.fixture
def unit_cubes():
    """Eight 1 x 1 x 1 boxes, exactly one full (2, 2, 2) bin."""
    return expand_items([(1, 1, 1, 8)])


@pytest.fixture
def cube_config(cube_bin):
    """Bin-minimization config for the unit cube instance."""
    return PackerConfig(bin=cube_bin, seed=11, population_size=20, max_generations=20)


@pytest.fixture
def mixed_boxes():
    """Twelve boxes of four shapes."""
    return expand_items([(4, 3, 2, 3), (2, 2, 5, 3), (3, 6, 1, 4), (1, 2, 2, 2)])


@pytest.fixture
def mixed_config():
    """Small bin for the mixed instance, all rotations allowed."""
    return PackerConfig(
        bin=BinSpec(width=6, depth=6, height=6),
        rotation=RotationMode.ALL,
        seed=3,
        population_size=30,
        max_generations=8,
        stagnation_window=100,
    )


@pytest.fixture
def fixed_config(cube_bin):
    """Fixed-bin config with a single (2, 2, 2) bin."""
    return PackerConfig(bin=cube_bin, mode=DecodingMode.FIXED_BINS, max_bins=1, seed=5)
