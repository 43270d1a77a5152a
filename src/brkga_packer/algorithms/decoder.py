"""
Chromosome decoder — random keys to a 3D placement.

The decoder is a pure, deterministic constructive heuristic: the same
chromosome, boxes and configuration always give the same placement and a
bit-identical fitness.  It holds no state between calls and is safe to run
from several worker processes at once.

Chromosome layout (n = number of boxes, length 3n):
    [0, n)    priority genes     — processing order (ascending)
    [n, 2n)   orientation genes  — which fitting orientation to use
    [2n, 3n)  bin genes          — where the bin scan starts (minimize_bins)

Placement rule per box:
    1. Scan open bins (starting bin from the bin gene, wrapping around).
    2. In the first bin that admits the box, take the EMS whose placement
       leaves the box's far corner farthest from the bin's far corner.
    3. Pick an orientation among those fitting that EMS from the
       orientation gene, and place the box at the EMS minimum corner.
    4. If no open bin admits it, open a new bin (or, in fixed_bins mode
       with the budget exhausted, leave it unplaced).

Fitness (lower is better):
    minimize_bins:  bins_used + least_load / bin_volume
    fixed_bins:     wasted_fraction + w * least_load / bin_volume  (feasible)
                    unplaced_count + unplaced_volume / total_volume (otherwise)
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from brkga_packer.algorithms.spaces import BinSpaces
from brkga_packer.core.config import DecodingMode, PackerConfig
from brkga_packer.core.errors import InfeasibleItemError
from brkga_packer.core.models import Box, PackingSummary, PlacedItem, Space

GENES_PER_BOX = 3


def chromosome_length(num_boxes: int) -> int:
    return GENES_PER_BOX * num_boxes


def ensure_boxes_fit(boxes: Sequence[Box], config: PackerConfig) -> None:
    """
    Raise InfeasibleItemError for the first box no orientation fits in an empty bin.
    """
    empty = Space(0.0, 0.0, 0.0, *config.bin.dims)
    for box in boxes:
        if not any(empty.fits(dims) for _, dims in box.orientations(config.rotation)):
            raise InfeasibleItemError(box.id, box.dims, config.bin.dims)


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def decode(
    chromosome: np.ndarray,
    boxes: Sequence[Box],
    config: PackerConfig,
) -> tuple[float, list[PlacedItem]]:
    """
    Decode a chromosome into (fitness, placements).

    Args:
        chromosome: Random-key vector of length ``3 * len(boxes)``.
        boxes:      Boxes to pack, ids ``0..n-1``.
        config:     Bin dimensions, decoding mode and rotation mode.

    Returns:
        The fitness and the placed boxes in placement order.

    Example:
        >>> from brkga_packer.core import BinSpec, expand_items
        >>> cfg = PackerConfig(bin=BinSpec(width=2, depth=2, height=2))
        >>> boxes = expand_items([(1, 1, 1, 8)])
        >>> fitness, placed = decode(np.full(24, 0.5), boxes, cfg)
        >>> len(placed), int(fitness)
        (8, 1)
    """
    bins, placements, unplaced = _pack(chromosome, boxes, config, record=True)
    return _fitness(bins, unplaced, boxes, config), placements


def evaluate(chromosome: np.ndarray, boxes: Sequence[Box], config: PackerConfig) -> float:
    """Fitness only; no placement list is built."""
    bins, _, unplaced = _pack(chromosome, boxes, config, record=False)
    return _fitness(bins, unplaced, boxes, config)


def summarize(
    placements: Sequence[PlacedItem],
    boxes: Sequence[Box],
    config: PackerConfig,
) -> PackingSummary:
    """Build the PackingSummary of a decoded placement."""
    loads: dict[int, float] = {}
    for p in placements:
        loads[p.bin_index] = loads.get(p.bin_index, 0.0) + p.volume
    placed_ids = {p.box_id for p in placements}
    num_bins = max(loads) + 1 if loads else 0
    return PackingSummary(
        bins_used=len(loads),
        bin_volume=config.bin.volume,
        bin_loads=tuple(loads.get(i, 0.0) for i in range(num_bins)),
        placed=len(placed_ids),
        unplaced_ids=tuple(b.id for b in boxes if b.id not in placed_ids),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Construction
# ─────────────────────────────────────────────────────────────────────────────

def _pack(
    chromosome: np.ndarray,
    boxes: Sequence[Box],
    config: PackerConfig,
    record: bool,
) -> tuple[list[BinSpaces], list[PlacedItem], list[Box]]:
    n = len(boxes)
    if len(chromosome) != chromosome_length(n):
        raise ValueError(
            f"chromosome has {len(chromosome)} genes, expected {chromosome_length(n)} "
            f"for {n} boxes"
        )

    genes = np.asarray(chromosome, dtype=float).tolist()
    priorities = genes[:n]
    orientation_genes = genes[n:2 * n]
    bin_genes = genes[2 * n:]

    # Stable: equal priorities keep box-id order.
    order = sorted(range(n), key=lambda i: priorities[i])

    # Smallest side / volume over the boxes still waiting after position k.
    min_dims = [math.inf] * (n + 1)
    min_vols = [math.inf] * (n + 1)
    for k in range(n - 1, -1, -1):
        box = boxes[order[k]]
        min_dims[k] = min(min_dims[k + 1], box.smallest_dimension)
        min_vols[k] = min(min_vols[k + 1], box.volume)

    minimize = config.mode is DecodingMode.MINIMIZE_BINS
    bin_dims = config.bin.dims
    bins: list[BinSpaces] = []
    placements: list[PlacedItem] = []
    unplaced: list[Box] = []

    for k, idx in enumerate(order):
        box = boxes[idx]
        allowed = box.orientations(config.rotation)

        target: BinSpaces | None = None
        ems_idx: int | None = None
        start = min(int(bin_genes[idx] * len(bins)), len(bins) - 1) if minimize and bins else 0
        for offset in range(len(bins)):
            candidate = bins[(start + offset) % len(bins)]
            ems_idx = candidate.best_space(allowed)
            if ems_idx is not None:
                target = candidate
                break

        if target is None:
            if not minimize and len(bins) >= config.max_bins:
                unplaced.append(box)
                continue
            target = BinSpaces(len(bins), bin_dims)
            ems_idx = target.best_space(allowed)
            if ems_idx is None:
                # Larger than an empty bin; ensure_boxes_fit rejects this upfront.
                unplaced.append(box)
                continue
            bins.append(target)

        ems = target.spaces[ems_idx]
        fitting = [(o, dims) for o, dims in allowed if ems.fits(dims)]
        choice = min(int(orientation_genes[idx] * len(fitting)), len(fitting) - 1)
        orientation, dims = fitting[choice]

        occupied = Space.from_placement(ems.origin, dims)
        target.allocate(occupied, min_dims[k + 1], min_vols[k + 1])

        if record:
            placements.append(PlacedItem(
                box_id=box.id, bin_index=target.index,
                x=ems.x1, y=ems.y1, z=ems.z1,
                width=dims[0], depth=dims[1], height=dims[2],
                orientation=orientation,
            ))

    return bins, placements, unplaced


# ─────────────────────────────────────────────────────────────────────────────
# Fitness
# ─────────────────────────────────────────────────────────────────────────────

def _fitness(
    bins: list[BinSpaces],
    unplaced: list[Box],
    boxes: Sequence[Box],
    config: PackerConfig,
) -> float:
    bin_volume = config.bin.volume
    least_load = min((b.used_volume for b in bins), default=0.0) / bin_volume

    if config.mode is DecodingMode.MINIMIZE_BINS:
        return len(bins) + least_load

    total_volume = sum(b.volume for b in boxes)
    if unplaced:
        return len(unplaced) + sum(b.volume for b in unplaced) / total_volume

    if not bins:
        return 0.0
    packed = sum(b.used_volume for b in bins)
    wasted = 1.0 - packed / (len(bins) * bin_volume)
    # Half the smallest gap between wasted fractions of different bin counts.
    k = config.max_bins
    weight = 0.5 * packed / (bin_volume * k * (k + 1))
    return wasted + weight * least_load
