"""
Exception types shared by the packer.

Configuration and input problems are ``ValueError`` subclasses so callers
that only care about "bad input" can catch one type.  Placement errors mark
decoder defects and are never recovered from.
"""


class ConfigError(ValueError):
    """Run configuration is invalid (raised before any generation runs)."""


class InfeasibleItemError(ValueError):
    """A box does not fit the bin under any permitted orientation."""

    def __init__(self, box_id: int, dims: tuple, bin_dims: tuple) -> None:
        self.box_id = box_id
        self.dims = dims
        self.bin_dims = bin_dims
        super().__init__(
            f"Box {box_id} with dimensions {dims} cannot fit in bin {bin_dims} "
            f"under any permitted orientation"
        )


class DatasetError(ValueError):
    """Item table is malformed (missing columns, non-positive values)."""


class EvaluationError(RuntimeError):
    """A worker failed to evaluate a chromosome batch."""


# ─────────────────────────────────────────────────────────────────────────────
# Placement validation
# ─────────────────────────────────────────────────────────────────────────────

class PlacementError(Exception):
    """Base class for placement validation errors."""


class OutOfBoundsError(PlacementError):
    """Box extends outside the bin boundary."""


class OverlapError(PlacementError):
    """Two boxes in the same bin intersect."""
