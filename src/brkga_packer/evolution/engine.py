"""
BRKGA evolution engine.

State machine::

    INITIALIZED ──initialize()──▶ EVALUATED ──step()──▶ EVOLVING ──▶ TERMINATED
                                                  ▲          │
                                                  └─step()───┘

Each generation:
    1. The ranked population is split into elites (top ``num_elites``) and
       non-elites.
    2. The next population is built as elites (unchanged), fresh mutants,
       then biased-crossover children (gene from the elite parent with
       probability ``inherit_elite_probability``).
    3. Mutants and children are evaluated, the population is re-ranked with
       a stable sort and the global best is updated on strict improvement.
    4. Termination: target fitness reached, max generations, stagnation for
       ``stagnation_window`` generations, or cooperative cancellation.

Usage:
    engine = BrkgaEngine(boxes, config)
    for snap in engine.iter_progress():
        print(snap.generation, snap.best_fitness)
    result = engine.result()

    # or simply
    result = BrkgaEngine(boxes, config).run()
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence

import numpy as np

from brkga_packer.algorithms.decoder import (
    chromosome_length,
    decode,
    ensure_boxes_fit,
    summarize,
)
from brkga_packer.algorithms.validator import validate_placements
from brkga_packer.core.config import PackerConfig
from brkga_packer.core.errors import ConfigError
from brkga_packer.core.models import Box, PackingSummary, PlacedItem
from brkga_packer.core.rng import Stream, derive_rng, random_keys, resolve_seed
from brkga_packer.evolution.evaluator import Evaluator, make_evaluator
from brkga_packer.evolution.population import Individual, Origin, Population, freeze


class EngineState(str, Enum):
    INITIALIZED = "initialized"
    EVALUATED = "evaluated"
    EVOLVING = "evolving"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    MAX_GENERATIONS = "max_generations"
    STAGNATION = "stagnation"
    CANCELLED = "cancelled"
    TARGET_REACHED = "target_reached"


# ─────────────────────────────────────────────────────────────────────────────
# Result records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProgressSnapshot:
    """Per-generation progress: generation number, best and mean fitness."""
    generation: int
    best_fitness: float
    mean_fitness: float

    def to_dict(self) -> dict:
        return {"generation": self.generation, "best_fitness": self.best_fitness,
                "mean_fitness": self.mean_fitness}


@dataclass(frozen=True)
class BestSolution:
    """Global best chromosome and the generation it was found in."""
    chromosome: np.ndarray
    fitness: float
    generation: int


@dataclass
class PackingResult:
    """
    Outcome of a full engine run.

    Attributes:
        best_chromosome: Chromosome of the global best.
        best_fitness:    Its fitness.
        placements:      Decoded placement of the global best.
        summary:         Bins used and utilization of that placement.
        generations:     Generations evolved after the initial evaluation.
        termination:     Why the run stopped.
        seed:            Top-level seed actually used.
        history:         One snapshot per generation, generation 0 included.
        elapsed_s:       Wall-clock duration of the run.
    """
    best_chromosome: np.ndarray
    best_fitness: float
    placements: list[PlacedItem]
    summary: PackingSummary
    generations: int
    termination: TerminationReason | None
    seed: int
    history: list[ProgressSnapshot] = field(default_factory=list)
    elapsed_s: float = 0.0

    def to_dict(self) -> dict:
        return {
            "best_fitness": self.best_fitness,
            "generations": self.generations,
            "termination": self.termination.value if self.termination else None,
            "seed": self.seed,
            "elapsed_s": round(self.elapsed_s, 3),
            "summary": self.summary.to_dict(),
            "placements": [p.to_dict() for p in self.placements],
            "best_chromosome": self.best_chromosome.tolist(),
            "history": [s.to_dict() for s in self.history],
        }


# ─────────────────────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────────────────────

class BrkgaEngine:
    """
    Population/generation state machine driving the decoder.

    Args:
        boxes:     Boxes to pack (ids ``0..n-1``).
        config:    PackerConfig, or a mapping of its fields.
        evaluator: Fitness evaluator; built from the config when omitted
                   (and then closed by the engine).
        progress:  Optional GenerationLogger-like observer.

    Raises:
        ConfigError:         invalid configuration or an empty box list.
        InfeasibleItemError: a box fits no empty bin in any permitted orientation.
    """

    def __init__(
        self,
        boxes: Sequence[Box],
        config: PackerConfig | Mapping[str, Any],
        evaluator: Evaluator | None = None,
        progress: Any = None,
    ) -> None:
        if not isinstance(config, PackerConfig):
            config = PackerConfig(**config)
        if not boxes:
            raise ConfigError("no boxes to pack")
        ensure_boxes_fit(boxes, config)

        self.boxes = list(boxes)
        self.config = config
        self.seed = resolve_seed(config.seed)

        self.population_size = config.resolve_population_size(len(self.boxes))
        self.num_elites = config.num_elites(self.population_size)
        self.num_mutants = config.num_mutants(self.population_size)
        self.num_children = self.population_size - self.num_elites - self.num_mutants
        self._length = chromosome_length(len(self.boxes))

        self._owns_evaluator = evaluator is None
        self._evaluator = evaluator if evaluator is not None else make_evaluator(self.boxes, config)

        if progress is None and config.verbose:
            from brkga_packer.monitoring.progress import GenerationLogger
            progress = GenerationLogger(verbose=True, every=config.log_every)
        self._progress = progress

        self._state = EngineState.INITIALIZED
        self._generation = 0
        self._best: BestSolution | None = None
        self._stale = 0
        self._history: list[ProgressSnapshot] = []
        self._termination: TerminationReason | None = None
        self._started = time.perf_counter()

        self._population = Population([
            Individual(random_keys(derive_rng(self.seed, Stream.INITIAL, 0, slot), self._length))
            for slot in range(self.population_size)
        ])

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def population(self) -> Population:
        return self._population

    @property
    def best(self) -> BestSolution | None:
        return self._best

    @property
    def termination(self) -> TerminationReason | None:
        return self._termination

    @property
    def history(self) -> list[ProgressSnapshot]:
        return list(self._history)

    # ── Transitions ──────────────────────────────────────────────────────

    def initialize(self) -> ProgressSnapshot:
        """Evaluate and rank the initial population (generation 0)."""
        if self._state is not EngineState.INITIALIZED:
            raise RuntimeError(f"initialize() called in state {self._state.value}")

        if self._progress is not None:
            self._progress.log_start(len(self.boxes), self.population_size, self.seed)

        self._evaluate_pending()
        self._update_best(0)
        self._state = EngineState.EVALUATED
        snapshot = self._record(improved=True)

        if self._reached_target():
            self._terminate(TerminationReason.TARGET_REACHED)
        return snapshot

    def step(self) -> ProgressSnapshot:
        """Evolve one generation; initializes first if needed."""
        if self._state is EngineState.INITIALIZED:
            self.initialize()
        if self._state is EngineState.TERMINATED:
            raise RuntimeError("step() called on a terminated engine")

        self._population = self._next_population()
        self._evaluate_pending()
        improved = self._update_best(self._generation + 1)
        self._generation += 1
        self._stale = 0 if improved else self._stale + 1
        self._state = EngineState.EVOLVING
        snapshot = self._record(improved)

        if self._reached_target():
            self._terminate(TerminationReason.TARGET_REACHED)
        elif self._generation >= self.config.max_generations:
            self._terminate(TerminationReason.MAX_GENERATIONS)
        elif self._stale >= self.config.stagnation_window:
            self._terminate(TerminationReason.STAGNATION)
        return snapshot

    def iter_progress(self, cancel: threading.Event | None = None) -> Iterator[ProgressSnapshot]:
        """
        Lazily run the engine, yielding one snapshot per generation.

        The first snapshot is generation 0 (the initial population).  The
        *cancel* event is checked between generations; once set the engine
        terminates with CANCELLED and keeps the best found so far.
        """
        if self._state is EngineState.INITIALIZED:
            yield self.initialize()
        while self._state is not EngineState.TERMINATED:
            if cancel is not None and cancel.is_set():
                self._terminate(TerminationReason.CANCELLED)
                break
            yield self.step()

    def run(self, cancel: threading.Event | None = None) -> PackingResult:
        """Run to termination and return the decoded global best."""
        try:
            for _ in self.iter_progress(cancel):
                pass
        finally:
            self.close()
        return self.result()

    def result(self) -> PackingResult:
        """
        Decode the global best into a PackingResult.

        Raises:
            RuntimeError:   before the initial population was evaluated.
            PlacementError: the decoded placement is invalid (validate_best).
        """
        if self._best is None:
            raise RuntimeError("no evaluated population yet; call initialize() first")

        fitness, placements = decode(self._best.chromosome, self.boxes, self.config)
        if self.config.validate_best:
            validate_placements(placements, self.config, self.boxes)

        return PackingResult(
            best_chromosome=self._best.chromosome,
            best_fitness=fitness,
            placements=placements,
            summary=summarize(placements, self.boxes, self.config),
            generations=self._generation,
            termination=self._termination,
            seed=self.seed,
            history=list(self._history),
            elapsed_s=time.perf_counter() - self._started,
        )

    def close(self) -> None:
        """Release an evaluator the engine created itself."""
        if self._owns_evaluator:
            self._evaluator.close()

    def __enter__(self) -> "BrkgaEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Internals ────────────────────────────────────────────────────────

    def _next_population(self) -> Population:
        ranked = self._population
        elites = ranked.elites(self.num_elites)
        non_elites = ranked.non_elites(self.num_elites)
        next_gen = self._generation + 1

        members = [e.as_elite() for e in elites]
        for _ in range(self.num_mutants):
            rng = derive_rng(self.seed, Stream.MUTANT, next_gen, len(members))
            members.append(Individual(random_keys(rng, self._length), origin=Origin.MUTANT))
        for _ in range(self.num_children):
            rng = derive_rng(self.seed, Stream.CROSSOVER, next_gen, len(members))
            members.append(self._crossover(rng, elites, non_elites))

        return Population(members)

    def _crossover(
        self,
        rng: np.random.Generator,
        elites: list[Individual],
        non_elites: list[Individual],
    ) -> Individual:
        elite = elites[int(rng.integers(len(elites)))].chromosome
        other = non_elites[int(rng.integers(len(non_elites)))].chromosome
        mask = rng.random(self._length) < self.config.inherit_elite_probability
        return Individual(freeze(np.where(mask, elite, other)), origin=Origin.CHILD)

    def _evaluate_pending(self) -> None:
        pending = self._population.unevaluated()
        if pending:
            chromosomes = [self._population[i].chromosome for i in pending]
            self._population.assign(pending, self._evaluator.evaluate(chromosomes))
        self._population.rank()

    def _update_best(self, generation: int) -> bool:
        leader = self._population.best
        if self._best is None or leader.fitness < self._best.fitness:
            self._best = BestSolution(leader.chromosome, leader.fitness, generation)
            return True
        return False

    def _record(self, improved: bool) -> ProgressSnapshot:
        snapshot = ProgressSnapshot(
            generation=self._generation,
            best_fitness=self._best.fitness,
            mean_fitness=self._population.mean_fitness(),
        )
        self._history.append(snapshot)
        if self._progress is not None:
            self._progress.log_generation(snapshot, improved)
        return snapshot

    def _reached_target(self) -> bool:
        target = self.config.target_fitness
        return target is not None and self._best.fitness <= target

    def _terminate(self, reason: TerminationReason) -> None:
        self._termination = reason
        self._state = EngineState.TERMINATED
        if self._progress is not None:
            self._progress.log_end(reason.value, self._generation, self._best.fitness)
