"""Placement algorithms: free-space bookkeeping, decoder and validator."""

from brkga_packer.algorithms.decoder import (
    chromosome_length,
    decode,
    ensure_boxes_fit,
    evaluate,
    summarize,
)
from brkga_packer.algorithms.spaces import BinSpaces
from brkga_packer.algorithms.validator import validate_placements

__all__ = [
    "BinSpaces",
    "chromosome_length",
    "decode",
    "ensure_boxes_fit",
    "evaluate",
    "summarize",
    "validate_placements",
]
