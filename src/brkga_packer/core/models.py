"""
Core data models for 3D bin packing.

All modules import their geometric types from here so the loader, decoder,
validator and report layers agree on one coordinate convention:

    x spans the bin width, y the bin depth, z the bin height.
    A position is always the minimum (back-bottom-left) corner.

Classes:
    Item         — tabular input row: dimensions and a count
    Box          — one physical box expanded from an Item
    Orientation  — table of the 6 axis-aligned permutations
    Space        — axis-aligned region inside a bin
    PlacedItem   — decoded position of one box
    PackingSummary — bins used and utilization of a placement
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from brkga_packer.core.config import RotationMode
from brkga_packer.core.errors import DatasetError

EPS = 1e-9

Dims = tuple[float, float, float]


# ─────────────────────────────────────────────────────────────────────────────
# Items & boxes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Item:
    """
    One row of the item table.

    Attributes:
        height: Z-axis extent.
        depth:  Y-axis extent.
        width:  X-axis extent.
        count:  Number of identical boxes of this kind.
    """
    height: float
    depth: float
    width: float
    count: int = 1

    def __post_init__(self):
        for name in ("height", "depth", "width"):
            if not getattr(self, name) > 0:
                raise DatasetError(f"Item {name} must be positive, got {getattr(self, name)!r}")
        if self.count < 0:
            raise DatasetError(f"Item count must not be negative, got {self.count!r}")

    def to_dict(self) -> dict:
        return {"height": self.height, "depth": self.depth,
                "width": self.width, "count": self.count}


@dataclass(frozen=True)
class Box:
    """
    A single box to be packed.

    Attributes:
        id:     Stable identifier, the index in the expanded box list.
        width:  X-axis extent.
        depth:  Y-axis extent.
        height: Z-axis extent.
        group:  Index of the Item row this box was expanded from.
    """
    id: int
    width: float
    depth: float
    height: float
    group: int = 0

    def __post_init__(self):
        if not all(d > 0 for d in self.dims):
            raise DatasetError(f"Box {self.id}: dimensions must be positive, got {self.dims}")

    @property
    def dims(self) -> Dims:
        return (self.width, self.depth, self.height)

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height

    @property
    def smallest_dimension(self) -> float:
        return min(self.width, self.depth, self.height)

    def orientations(self, mode: RotationMode) -> list[tuple[int, Dims]]:
        """Permitted (orientation index, oriented dims) pairs for *mode*."""
        return Orientation.for_mode(self.width, self.depth, self.height, mode)

    def to_dict(self) -> dict:
        return {"id": self.id, "width": self.width, "depth": self.depth,
                "height": self.height, "group": self.group}


def expand_items(items: Iterable[Item | tuple]) -> list[Box]:
    """
    Expand item rows into individual boxes with ids ``0..n-1``.

    Rows may be :class:`Item` instances or ``(height, depth, width, count)``
    tuples, the shape produced by tabular loaders.
    """
    boxes: list[Box] = []
    for group, row in enumerate(items):
        item = row if isinstance(row, Item) else Item(*row)
        for _ in range(item.count):
            boxes.append(Box(id=len(boxes), width=item.width, depth=item.depth,
                             height=item.height, group=group))
    return boxes


# ─────────────────────────────────────────────────────────────────────────────
# Orientation
# ─────────────────────────────────────────────────────────────────────────────

class Orientation:
    """
    Maps an orientation index to the (width, depth, height) after rotation.

    All orientations are orthogonal (90° axis-aligned rotations only).
    Index 0-1 keep the height vertical (rotation about the z-axis only).
    Index 0-5 cover all 6 axis-aligned permutations.
    """

    # Permutations of (width, depth, height), index 0 is the box as given.
    PERMUTATIONS: tuple[tuple[int, int, int], ...] = (
        (0, 1, 2), (1, 0, 2),   # upright (z-axis 90°)
        (0, 2, 1), (2, 0, 1),   # y-axis rotations
        (1, 2, 0), (2, 1, 0),   # x-axis rotations
    )

    @staticmethod
    def apply(index: int, w: float, d: float, h: float) -> Dims:
        """Oriented dimensions of a (w, d, h) box under orientation *index*."""
        src = (w, d, h)
        a, b, c = Orientation.PERMUTATIONS[index]
        return (src[a], src[b], src[c])

    @staticmethod
    def get_all(w: float, d: float, h: float) -> list[tuple[int, Dims]]:
        """Return all unique orthogonal orientations (up to 6)."""
        return Orientation._unique(range(6), w, d, h)

    @staticmethod
    def get_upright(w: float, d: float, h: float) -> list[tuple[int, Dims]]:
        """Return only upright orientations (z-axis rotation, up to 2)."""
        return Orientation._unique(range(2), w, d, h)

    @staticmethod
    def for_mode(
        w: float, d: float, h: float, mode: RotationMode,
    ) -> list[tuple[int, Dims]]:
        if mode is RotationMode.ALL:
            return Orientation.get_all(w, d, h)
        if mode is RotationMode.UPRIGHT:
            return Orientation.get_upright(w, d, h)
        return [(0, (w, d, h))]

    @staticmethod
    def _unique(indices: Iterable[int], w: float, d: float, h: float) -> list[tuple[int, Dims]]:
        seen: set = set()
        orientations: list[tuple[int, Dims]] = []
        for idx in indices:
            dims = Orientation.apply(idx, w, d, h)
            if dims not in seen:
                seen.add(dims)
                orientations.append((idx, dims))
        return orientations


# ─────────────────────────────────────────────────────────────────────────────
# Space
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Space:
    """
    Axis-aligned region ``[x1, x2) × [y1, y2) × [z1, z2)`` inside a bin.

    Used both for empty maximal spaces and for the volume occupied by a
    placed box.
    """
    x1: float
    y1: float
    z1: float
    x2: float
    y2: float
    z2: float

    @classmethod
    def from_placement(cls, origin: tuple[float, float, float], dims: Dims) -> "Space":
        x, y, z = origin
        w, d, h = dims
        return cls(x, y, z, x + w, y + d, z + h)

    @property
    def origin(self) -> tuple[float, float, float]:
        return (self.x1, self.y1, self.z1)

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def depth(self) -> float:
        return self.y2 - self.y1

    @property
    def height(self) -> float:
        return self.z2 - self.z1

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height

    @property
    def smallest_dimension(self) -> float:
        return min(self.width, self.depth, self.height)

    def fits(self, dims: Dims) -> bool:
        """True if a box with *dims* fits inside this space."""
        w, d, h = dims
        return (w <= self.width + EPS and d <= self.depth + EPS
                and h <= self.height + EPS)

    def intersects(self, other: "Space") -> bool:
        """True if the two regions share a positive volume."""
        return (self.x1 < other.x2 - EPS and other.x1 < self.x2 - EPS
                and self.y1 < other.y2 - EPS and other.y1 < self.y2 - EPS
                and self.z1 < other.z2 - EPS and other.z1 < self.z2 - EPS)

    def contains(self, other: "Space") -> bool:
        """True if *other* lies entirely inside this region."""
        return (self.x1 <= other.x1 + EPS and self.y1 <= other.y1 + EPS
                and self.z1 <= other.z1 + EPS and other.x2 <= self.x2 + EPS
                and other.y2 <= self.y2 + EPS and other.z2 <= self.z2 + EPS)


# ─────────────────────────────────────────────────────────────────────────────
# Placement (decoded, immutable result of placing one box)
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlacedItem:
    """
    A single decoded box placement.

    Attributes:
        box_id:       ID of the placed box.
        bin_index:    Bin the box was placed in (0-based, in opening order).
        x, y, z:      Position of the minimum corner.
        width/depth/height: Dimensions after rotation.
        orientation:  Index into :attr:`Orientation.PERMUTATIONS`.
    """
    box_id: int
    bin_index: int
    x: float
    y: float
    z: float
    width: float
    depth: float
    height: float
    orientation: int

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.depth

    @property
    def z_max(self) -> float:
        return self.z + self.height

    @property
    def space(self) -> Space:
        return Space(self.x, self.y, self.z, self.x_max, self.y_max, self.z_max)

    def to_dict(self) -> dict:
        return {
            "box_id": self.box_id,
            "bin": self.bin_index,
            "position": [self.x, self.y, self.z],
            "dims": [self.width, self.depth, self.height],
            "orientation": self.orientation,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "PlacedItem":
        return cls(
            box_id=d["box_id"], bin_index=d["bin"],
            x=d["position"][0], y=d["position"][1], z=d["position"][2],
            width=d["dims"][0], depth=d["dims"][1], height=d["dims"][2],
            orientation=d["orientation"],
        )


@dataclass(frozen=True)
class PackingSummary:
    """
    Summary record of a decoded placement.

    Attributes:
        bins_used:   Number of bins holding at least one box.
        bin_volume:  Volume of a single bin.
        bin_loads:   Packed volume per bin, in bin order.
        placed:      Number of boxes placed.
        unplaced_ids: Boxes that did not fit the bin budget (fixed-bin mode).
    """
    bins_used: int
    bin_volume: float
    bin_loads: tuple[float, ...] = ()
    placed: int = 0
    unplaced_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def packed_volume(self) -> float:
        return sum(self.bin_loads)

    @property
    def utilization_pct(self) -> float:
        """Packed volume over the volume of all used bins, in percent."""
        if self.bins_used == 0 or self.bin_volume <= 0:
            return 0.0
        return self.packed_volume / (self.bins_used * self.bin_volume) * 100

    @property
    def bin_utilization_pct(self) -> list[float]:
        if self.bin_volume <= 0:
            return [0.0 for _ in self.bin_loads]
        return [load / self.bin_volume * 100 for load in self.bin_loads]

    @property
    def is_feasible(self) -> bool:
        return not self.unplaced_ids

    def to_dict(self) -> dict:
        return {
            "bins_used": self.bins_used,
            "bin_volume": self.bin_volume,
            "placed": self.placed,
            "unplaced_ids": list(self.unplaced_ids),
            "utilization_pct": self.utilization_pct,
            "bin_utilization_pct": self.bin_utilization_pct,
        }
