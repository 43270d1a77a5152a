"""
Fitness evaluators — sequential and process-parallel.

Both evaluators expose the same contract::

    fitnesses = evaluator.evaluate(chromosomes)

The returned list is in submission order whatever the worker count or the
order in which workers finish.  The decoder is pure and no randomness is
drawn during evaluation, so the values are bit-identical across worker
counts.

The parallel evaluator keeps one ProcessPoolExecutor for the whole run.
Boxes and configuration are shipped once to every worker through the pool
initializer; only chromosomes and fitness values cross the process boundary
per generation.  A failed worker is fatal: EvaluationError is raised and no
value is ever substituted.
"""

from __future__ import annotations

import math
import os
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from typing import Sequence

import numpy as np

from brkga_packer.algorithms.decoder import evaluate as decode_fitness
from brkga_packer.core.config import PackerConfig
from brkga_packer.core.errors import EvaluationError
from brkga_packer.core.models import Box


# ─────────────────────────────────────────────────────────────────────────────
# Worker side (module-level so it pickles by reference)
# ─────────────────────────────────────────────────────────────────────────────

_WORKER_BOXES: list[Box] | None = None
_WORKER_CONFIG: PackerConfig | None = None


def _init_worker(boxes: list[Box], config: PackerConfig) -> None:
    global _WORKER_BOXES, _WORKER_CONFIG
    _WORKER_BOXES = boxes
    _WORKER_CONFIG = config


def _evaluate_chunk(chromosomes: list[np.ndarray]) -> list[float]:
    return [decode_fitness(c, _WORKER_BOXES, _WORKER_CONFIG) for c in chromosomes]


# ─────────────────────────────────────────────────────────────────────────────
# Evaluators
# ─────────────────────────────────────────────────────────────────────────────

class SequentialEvaluator:
    """Decode every chromosome in the calling process, one after another."""

    workers = 1

    def __init__(self, boxes: Sequence[Box], config: PackerConfig) -> None:
        self.boxes = list(boxes)
        self.config = config

    def evaluate(self, chromosomes: Sequence[np.ndarray]) -> list[float]:
        results = []
        for i, chromosome in enumerate(chromosomes):
            try:
                results.append(decode_fitness(chromosome, self.boxes, self.config))
            except Exception as exc:
                raise EvaluationError(f"evaluation of chromosome {i} failed: {exc}") from exc
        return results

    def close(self) -> None:
        pass

    def __enter__(self) -> "SequentialEvaluator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class ParallelEvaluator:
    """
    Decode chromosomes across a pool of worker processes.

    The batch is cut into one contiguous chunk per worker; each chunk's
    results are written back at the chunk's offset, so completion order
    never affects the output order.

    Args:
        boxes:   Boxes to pack (shipped once per worker).
        config:  Run configuration (shipped once per worker).
        workers: Pool size; defaults to ``config.workers`` or ``os.cpu_count()``.
    """

    def __init__(
        self,
        boxes: Sequence[Box],
        config: PackerConfig,
        workers: int | None = None,
    ) -> None:
        self.boxes = list(boxes)
        self.config = config
        self.workers = max(1, workers or config.workers or os.cpu_count() or 1)
        self._pool: ProcessPoolExecutor | None = None

    def _ensure_pool(self) -> ProcessPoolExecutor:
        if self._pool is None:
            self._pool = ProcessPoolExecutor(
                max_workers=self.workers,
                initializer=_init_worker,
                initargs=(self.boxes, self.config),
            )
        return self._pool

    def evaluate(self, chromosomes: Sequence[np.ndarray]) -> list[float]:
        if not chromosomes:
            return []
        pool = self._ensure_pool()
        size = math.ceil(len(chromosomes) / self.workers)
        results: list[float | None] = [None] * len(chromosomes)

        futures: dict[Future, int] = {
            pool.submit(_evaluate_chunk, list(chromosomes[start:start + size])): start
            for start in range(0, len(chromosomes), size)
        }
        for future in as_completed(futures):
            start = futures[future]
            try:
                chunk = future.result()
            except Exception as exc:
                for pending in futures:
                    pending.cancel()
                raise EvaluationError(
                    f"worker failed on chromosomes {start}..{start + size - 1}: {exc}"
                ) from exc
            results[start:start + len(chunk)] = chunk

        if any(r is None for r in results):
            raise EvaluationError("worker pool returned an incomplete batch")
        return results

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None

    def __enter__(self) -> "ParallelEvaluator":
        self._ensure_pool()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


Evaluator = SequentialEvaluator | ParallelEvaluator


def make_evaluator(boxes: Sequence[Box], config: PackerConfig) -> Evaluator:
    """Parallel evaluator when ``config.parallel`` is set, else sequential."""
    if config.parallel:
        return ParallelEvaluator(boxes, config)
    return SequentialEvaluator(boxes, config)
