"""Core types: configuration, data models, errors and random streams."""

from brkga_packer.core.config import (
    BinSpec,
    DecodingMode,
    PackerConfig,
    RotationMode,
    load_config,
)
from brkga_packer.core.errors import (
    ConfigError,
    DatasetError,
    EvaluationError,
    InfeasibleItemError,
    OutOfBoundsError,
    OverlapError,
    PlacementError,
)
from brkga_packer.core.models import (
    Box,
    Item,
    Orientation,
    PackingSummary,
    PlacedItem,
    Space,
    expand_items,
)

__all__ = [
    "BinSpec",
    "DecodingMode",
    "PackerConfig",
    "RotationMode",
    "load_config",
    "ConfigError",
    "DatasetError",
    "EvaluationError",
    "InfeasibleItemError",
    "OutOfBoundsError",
    "OverlapError",
    "PlacementError",
    "Box",
    "Item",
    "Orientation",
    "PackingSummary",
    "PlacedItem",
    "Space",
    "expand_items",
]
