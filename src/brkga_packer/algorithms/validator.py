"""
Placement validator — pure-function geometric checks on a decoded placement.

The decoder never produces an invalid placement; these checks exist to catch
decoder defects.  They run in the test-suite and on the final best placement
of a run when ``validate_best`` is enabled.  A failure is fatal.

Checks:
  1. Bounds    — every box lies inside its bin on all axes
  2. Overlap   — no two boxes in the same bin share a positive volume
  3. Identity  — each box is placed at most once, with its own dimensions
"""

from __future__ import annotations

from typing import Sequence

from brkga_packer.core.config import PackerConfig
from brkga_packer.core.errors import OutOfBoundsError, OverlapError, PlacementError
from brkga_packer.core.models import EPS, Box, PlacedItem


def validate_placements(
    placements: Sequence[PlacedItem],
    config: PackerConfig,
    boxes: Sequence[Box] | None = None,
) -> bool:
    """
    Validate a full placement against the bin and against itself.

    Args:
        placements: Decoded placements, any order.
        config:     Supplies the bin dimensions.
        boxes:      When given, the oriented dimensions of each placement are
                    checked against the box they claim to be.

    Returns:
        True if all checks pass.

    Raises:
        OutOfBoundsError: a box extends outside its bin.
        OverlapError:     two boxes in one bin intersect.
        PlacementError:   a box is placed twice or with foreign dimensions.
    """
    bw, bd, bh = config.bin.dims
    seen: set[int] = set()
    by_bin: dict[int, list[PlacedItem]] = {}

    for p in placements:
        # ── 1. Bounds ────────────────────────────────────────────────────
        if p.bin_index < 0:
            raise OutOfBoundsError(f"Box {p.box_id}: negative bin index {p.bin_index}")
        if not (p.width > 0 and p.depth > 0 and p.height > 0):
            raise OutOfBoundsError(
                f"Box {p.box_id}: non-positive extent {p.width}x{p.depth}x{p.height}"
            )
        if p.x < -EPS or p.y < -EPS or p.z < -EPS:
            raise OutOfBoundsError(
                f"Box {p.box_id}: negative coordinate ({p.x:.3f}, {p.y:.3f}, {p.z:.3f})"
            )
        if p.x_max > bw + EPS:
            raise OutOfBoundsError(f"Box {p.box_id}: X overflow {p.x_max:.3f} > {bw:.3f}")
        if p.y_max > bd + EPS:
            raise OutOfBoundsError(f"Box {p.box_id}: Y overflow {p.y_max:.3f} > {bd:.3f}")
        if p.z_max > bh + EPS:
            raise OutOfBoundsError(f"Box {p.box_id}: Z overflow {p.z_max:.3f} > {bh:.3f}")

        # ── 3. Identity ──────────────────────────────────────────────────
        if p.box_id in seen:
            raise PlacementError(f"Box {p.box_id} placed more than once")
        seen.add(p.box_id)
        if boxes is not None:
            box = boxes[p.box_id]
            if sorted((p.width, p.depth, p.height)) != sorted(box.dims):
                raise PlacementError(
                    f"Box {p.box_id}: placed as {p.width}x{p.depth}x{p.height}, "
                    f"expected a rotation of {box.width}x{box.depth}x{box.height}"
                )

        by_bin.setdefault(p.bin_index, []).append(p)

    # ── 2. Overlap ───────────────────────────────────────────────────────
    for bin_index, items in by_bin.items():
        for i, a in enumerate(items):
            region = a.space
            for b in items[i + 1:]:
                if region.intersects(b.space):
                    raise OverlapError(
                        f"Bin {bin_index}: box {a.box_id} at ({a.x}, {a.y}, {a.z}) "
                        f"overlaps box {b.box_id} at ({b.x}, {b.y}, {b.z})"
                    )

    return True
