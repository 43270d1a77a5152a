"""Metrics tracking and export for packing runs.

Provides dataclasses for a run's per-bin and aggregate metrics and helpers
that write them (plus the best placement, for external renderers) to JSON
and CSV.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from brkga_packer.evolution.engine import PackingResult

BIN_FIELDS = ["bin_index", "boxes_placed", "utilization_pct", "volume_used", "volume_total"]
PLACEMENT_FIELDS = ["box_id", "bin", "x", "y", "z", "width", "depth", "height", "orientation"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BinMetrics:
    """Metrics for a single bin of the best placement.

    Attributes:
        bin_index: Bin number in opening order.
        boxes_placed: Number of boxes in the bin.
        utilization_pct: Volume utilization percentage (0-100).
        volume_used: Packed volume.
        volume_total: Bin volume.
    """

    bin_index: int
    boxes_placed: int
    utilization_pct: float
    volume_used: float
    volume_total: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RunMetrics:
    """Aggregate metrics for one engine run.

    Attributes:
        run_id: Identifier of the run (used for output file names).
        mode: Decoding mode value.
        num_boxes: Boxes in the instance.
        population_size: Resolved population size.
        seed: Top-level seed used.
        best_fitness: Fitness of the global best.
        bins_used: Bins holding at least one box.
        unplaced: Boxes left out (fixed_bins mode only).
        utilization_pct: Packed volume over the volume of used bins.
        generations: Generations evolved.
        termination: Termination reason value.
        runtime_seconds: Wall-clock duration.
        started_at: Run start timestamp.
        completed_at: Run completion timestamp (None if running).
        bin_metrics: Per-bin metrics.
    """

    run_id: str
    mode: str
    num_boxes: int = 0
    population_size: int = 0
    seed: int | None = None
    best_fitness: float = 0.0
    bins_used: int = 0
    unplaced: int = 0
    utilization_pct: float = 0.0
    generations: int = 0
    termination: str | None = None
    runtime_seconds: float = 0.0
    started_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None
    bin_metrics: list[BinMetrics] = field(default_factory=list)

    @classmethod
    def from_result(
        cls,
        run_id: str,
        result: PackingResult,
        mode: str,
        population_size: int = 0,
    ) -> "RunMetrics":
        """Build the metrics of a finished run from its PackingResult."""
        summary = result.summary
        counts: dict[int, int] = {}
        for p in result.placements:
            counts[p.bin_index] = counts.get(p.bin_index, 0) + 1

        metrics = cls(
            run_id=run_id,
            mode=mode,
            num_boxes=summary.placed + len(summary.unplaced_ids),
            population_size=population_size,
            seed=result.seed,
            best_fitness=result.best_fitness,
            bins_used=summary.bins_used,
            unplaced=len(summary.unplaced_ids),
            utilization_pct=summary.utilization_pct,
            generations=result.generations,
            termination=result.termination.value if result.termination else None,
        )
        for i, load in enumerate(summary.bin_loads):
            metrics.bin_metrics.append(BinMetrics(
                bin_index=i,
                boxes_placed=counts.get(i, 0),
                utilization_pct=load / summary.bin_volume * 100,
                volume_used=load,
                volume_total=summary.bin_volume,
            ))
        metrics.mark_complete(result.elapsed_s)
        return metrics

    def mark_complete(self, runtime_seconds: float | None = None) -> None:
        """Mark the run as complete; runtime defaults to now minus started_at."""
        self.completed_at = _now()
        if runtime_seconds is None:
            runtime_seconds = (self.completed_at - self.started_at).total_seconds()
        self.runtime_seconds = runtime_seconds

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["started_at"] = self.started_at.isoformat()
        d["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        d["bin_metrics"] = [b.to_dict() for b in self.bin_metrics]
        return d

    def to_summary_dict(self) -> dict[str, Any]:
        """Aggregate metrics only (no bin_metrics list)."""
        d = self.to_dict()
        del d["bin_metrics"]
        return d


def export_to_json(
    metrics: RunMetrics,
    output_path: Path | str,
    result: PackingResult | None = None,
    include_bins: bool = True,
) -> None:
    """Export run metrics to a JSON file.

    Args:
        metrics: RunMetrics instance to export.
        output_path: Path to output JSON file.
        result: When given, its placements and progress history are
            written alongside the metrics.
        include_bins: If False, write the aggregate metrics only.

    Example:
        >>> m = RunMetrics("run_001", "minimize_bins")
        >>> export_to_json(m, "/tmp/run_001.json", include_bins=False)
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = metrics.to_dict() if include_bins else metrics.to_summary_dict()
    if result is not None:
        data["placements"] = [p.to_dict() for p in result.placements]
        data["history"] = [s.to_dict() for s in result.history]

    with output_path.open("w") as f:
        json.dump(data, f, indent=2)


def export_to_csv(metrics: RunMetrics, output_path: Path | str) -> None:
    """Export per-bin metrics to a CSV file (header only when there are no bins)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=BIN_FIELDS)
        writer.writeheader()
        for b in metrics.bin_metrics:
            writer.writerow(b.to_dict())


def export_placements_csv(result: PackingResult, output_path: Path | str) -> None:
    """Write one row per placed box, the input format of external renderers."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(PLACEMENT_FIELDS)
        for p in result.placements:
            writer.writerow([p.box_id, p.bin_index, p.x, p.y, p.z,
                             p.width, p.depth, p.height, p.orientation])


def print_summary(metrics: RunMetrics) -> str:
    """Generate a human-readable summary of run metrics.

    Returns:
        Formatted multi-line summary string.

    Example:
        >>> m = RunMetrics("run_001", "minimize_bins", num_boxes=8, bins_used=1)
        >>> "Run: run_001" in print_summary(m)
        True
    """
    lines = [
        "=" * 60,
        f"Run: {metrics.run_id}",
        f"Mode: {metrics.mode}",
        "=" * 60,
        f"Boxes: {metrics.num_boxes}",
        f"Population: {metrics.population_size}",
        f"Seed: {metrics.seed}",
        f"Generations: {metrics.generations} ({metrics.termination or 'running'})",
        "",
        f"Best fitness: {metrics.best_fitness:.6f}",
        f"Bins used: {metrics.bins_used}",
        f"Unplaced: {metrics.unplaced}",
        f"Utilization: {metrics.utilization_pct:.2f}%",
    ]
    for b in metrics.bin_metrics:
        lines.append(f"  Bin {b.bin_index:3d}: {b.boxes_placed:4d} boxes  {b.utilization_pct:6.2f}%")
    lines += [
        "",
        f"Runtime: {metrics.runtime_seconds:.1f} seconds",
        f"Started:   {metrics.started_at.isoformat()}",
        f"Completed: {metrics.completed_at.isoformat() if metrics.completed_at else 'In Progress'}",
        "=" * 60,
    ]
    return "\n".join(lines)
