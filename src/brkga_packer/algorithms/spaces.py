"""
Bin space bookkeeping — empty maximal spaces (EMS) of one bin.

Each open bin keeps an arena (a plain list) of the maximal empty regions
left after the boxes placed so far.  The minimum corner of every EMS is a
candidate insertion point.  Spaces are referenced by their list index, and
the index order is the insertion order, which is also the tie-break order
when two spaces score the same.

Placing a box:
    1. Every EMS that intersects the box is removed.
    2. Each removed EMS contributes up to 6 residual spaces: the slabs of
       the EMS on either side of the box along x, y and z.
    3. Residuals with a zero side, or too small for any box still waiting,
       are dropped, and so is any space contained in another one.

References:
    Gonçalves, J.F. & Resende, M.G.C. (2013).
    "A biased random key genetic algorithm for 2D and 3D bin packing
    problems." International Journal of Production Economics, 145(2).
"""

from __future__ import annotations

from brkga_packer.core.models import EPS, Dims, Space


class BinSpaces:
    """
    Free-space state of a single bin.

    Attributes:
        index:       Bin number in opening order.
        bin_dims:    (width, depth, height) of the bin.
        spaces:      Arena of empty maximal spaces.
        used_volume: Total volume of boxes placed in this bin.
    """

    __slots__ = ("index", "bin_dims", "spaces", "used_volume")

    def __init__(self, index: int, bin_dims: Dims) -> None:
        self.index = index
        self.bin_dims = bin_dims
        w, d, h = bin_dims
        self.spaces: list[Space] = [Space(0.0, 0.0, 0.0, w, d, h)]
        self.used_volume: float = 0.0

    # ── Queries ──────────────────────────────────────────────────────────

    def best_space(self, orientations: list[tuple[int, Dims]]) -> int | None:
        """
        Index of the EMS where the box sits deepest toward the bin origin.

        For every EMS and every orientation that fits it, the box's far
        corner is compared with the bin's far corner; the largest squared
        distance wins.  Equal distances keep the lower EMS index.

        Returns:
            The arena index of the chosen EMS, or None if the box fits nowhere.
        """
        bw, bd, bh = self.bin_dims
        best_dist = -1.0
        best_idx: int | None = None

        for idx, ems in enumerate(self.spaces):
            for _, dims in orientations:
                if not ems.fits(dims):
                    continue
                dx = bw - (ems.x1 + dims[0])
                dy = bd - (ems.y1 + dims[1])
                dz = bh - (ems.z1 + dims[2])
                dist = dx * dx + dy * dy + dz * dz
                if dist > best_dist + EPS:
                    best_dist = dist
                    best_idx = idx

        return best_idx

    # ── Mutation ─────────────────────────────────────────────────────────

    def allocate(self, occupied: Space, min_dimension: float, min_volume: float) -> None:
        """
        Mark *occupied* as filled and rebuild the affected spaces.

        Args:
            occupied:      Region taken by the newly placed box.
            min_dimension: Smallest side among boxes still to be placed.
            min_volume:    Smallest volume among boxes still to be placed.
        """
        self.used_volume += occupied.volume

        def usable(space: Space) -> bool:
            return (space.smallest_dimension >= min_dimension - EPS
                    and space.volume >= min_volume - EPS)

        kept: list[Space] = []
        residuals: list[Space] = []
        for ems in self.spaces:
            if ems.intersects(occupied):
                residuals.extend(r for r in _difference(ems, occupied) if usable(r))
            elif usable(ems):
                kept.append(ems)

        for i, candidate in enumerate(residuals):
            if any(other.contains(candidate) for other in kept):
                continue
            if any(
                j != i and other.contains(candidate)
                and (j < i or not candidate.contains(other))
                for j, other in enumerate(residuals)
            ):
                continue
            kept.append(candidate)

        self.spaces = kept


def _difference(ems: Space, box: Space) -> list[Space]:
    """Slabs of *ems* left on each side of *box* (which must intersect it)."""
    ix1, iy1, iz1 = max(ems.x1, box.x1), max(ems.y1, box.y1), max(ems.z1, box.z1)
    ix2, iy2, iz2 = min(ems.x2, box.x2), min(ems.y2, box.y2), min(ems.z2, box.z2)

    slabs = [
        Space(ems.x1, ems.y1, ems.z1, ix1, ems.y2, ems.z2),
        Space(ix2, ems.y1, ems.z1, ems.x2, ems.y2, ems.z2),
        Space(ems.x1, ems.y1, ems.z1, ems.x2, iy1, ems.z2),
        Space(ems.x1, iy2, ems.z1, ems.x2, ems.y2, ems.z2),
        Space(ems.x1, ems.y1, ems.z1, ems.x2, ems.y2, iz1),
        Space(ems.x1, ems.y1, iz2, ems.x2, ems.y2, ems.z2),
    ]
    return [s for s in slabs if s.smallest_dimension > EPS]
