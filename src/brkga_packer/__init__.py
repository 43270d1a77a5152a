"""
brkga-packer: 3D bin packing with a biased random-key genetic algorithm.

Usage:
    from brkga_packer import BinSpec, PackerConfig, pack_items

    config = PackerConfig(bin=BinSpec(width=2, depth=2, height=2), seed=1)
    result = pack_items([(1, 1, 1, 8)], config)
    print(result.summary.bins_used)
"""

from brkga_packer.algorithms.decoder import decode, evaluate
from brkga_packer.core.config import BinSpec, DecodingMode, PackerConfig, RotationMode, load_config
from brkga_packer.core.errors import ConfigError, EvaluationError, InfeasibleItemError
from brkga_packer.core.models import Box, Item, PlacedItem, expand_items
from brkga_packer.evolution.engine import BrkgaEngine, PackingResult, TerminationReason
from brkga_packer.runner.experiment import pack_items

__version__ = "0.1.0"

__all__ = [
    "decode",
    "evaluate",
    "BinSpec",
    "DecodingMode",
    "PackerConfig",
    "RotationMode",
    "load_config",
    "ConfigError",
    "EvaluationError",
    "InfeasibleItemError",
    "Box",
    "Item",
    "PlacedItem",
    "expand_items",
    "BrkgaEngine",
    "PackingResult",
    "TerminationReason",
    "pack_items",
]
