"""Evolution layer: population model, fitness evaluators and the BRKGA engine."""

from brkga_packer.evolution.engine import (
    BestSolution,
    BrkgaEngine,
    EngineState,
    PackingResult,
    ProgressSnapshot,
    TerminationReason,
)
from brkga_packer.evolution.evaluator import (
    ParallelEvaluator,
    SequentialEvaluator,
    make_evaluator,
)
from brkga_packer.evolution.population import Individual, Origin, Population

__all__ = [
    "BestSolution",
    "BrkgaEngine",
    "EngineState",
    "PackingResult",
    "ProgressSnapshot",
    "TerminationReason",
    "ParallelEvaluator",
    "SequentialEvaluator",
    "make_evaluator",
    "Individual",
    "Origin",
    "Population",
]
