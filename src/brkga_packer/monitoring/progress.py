"""
Generation logger — console output and structured recording of each generation.

Usage:
    logger = GenerationLogger(verbose=True, every=10)
    engine = BrkgaEngine(boxes, config, progress=logger)
    engine.run()
    rows = logger.get_records()
"""

from __future__ import annotations

import time
from typing import List


class GenerationLogger:
    """
    Logs engine progress to the console and stores it for export.

    Every generation is recorded; with ``verbose`` set, generation 0, every
    ``every``-th generation and every improvement are printed.
    """

    def __init__(self, verbose: bool = False, every: int = 10) -> None:
        self.verbose = verbose
        self.every = max(1, every)
        self._records: List[dict] = []
        self._t0 = time.perf_counter()

    def log_start(self, num_boxes: int, population_size: int, seed: int) -> None:
        self._t0 = time.perf_counter()
        if self.verbose:
            print(f"  BRKGA: {num_boxes} boxes, population {population_size}, seed {seed}")

    def log_generation(self, snapshot, improved: bool) -> None:
        """Record one ProgressSnapshot; print it when due."""
        elapsed = time.perf_counter() - self._t0
        row = snapshot.to_dict()
        row["improved"] = improved
        row["elapsed_s"] = round(elapsed, 4)
        self._records.append(row)

        if not self.verbose:
            return
        if snapshot.generation % self.every == 0 or improved:
            mark = "  *" if improved else ""
            print(
                f"  Gen {snapshot.generation:4d}: "
                f"best={snapshot.best_fitness:.6f}  "
                f"mean={snapshot.mean_fitness:.6f}  "
                f"[{elapsed:.1f}s]{mark}"
            )

    def log_end(self, reason: str, generations: int, best_fitness: float) -> None:
        if self.verbose:
            print(f"  Stopped after {generations} generations ({reason}), best={best_fitness:.6f}")

    def get_records(self) -> List[dict]:
        """All recorded generations as dicts (for JSON output)."""
        return list(self._records)
