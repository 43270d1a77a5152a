"""
Chromosome and population model.

A chromosome is a read-only numpy vector of random keys in [0, 1).  An
Individual pairs it with its fitness (None until evaluated) and the way it
was created; a Population is the fixed-size, ranked list of individuals of
one generation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import numpy as np


class Origin(str, Enum):
    """How an individual entered the population."""

    INITIAL = "initial"
    ELITE = "elite"
    MUTANT = "mutant"
    CHILD = "child"


def freeze(genes: np.ndarray) -> np.ndarray:
    """Return *genes* as a read-only float array (copied if still writeable)."""
    arr = np.array(genes, dtype=float, copy=True) if genes.flags.writeable else genes
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class Individual:
    """
    One population member.

    Attributes:
        chromosome: Read-only random-key vector.
        fitness:    Decoded fitness, None while unevaluated.
        origin:     Creation path (initial draw, elite copy, mutant, child).
    """
    chromosome: np.ndarray
    fitness: float | None = None
    origin: Origin = Origin.INITIAL

    @property
    def evaluated(self) -> bool:
        return self.fitness is not None

    def with_fitness(self, fitness: float) -> "Individual":
        return Individual(self.chromosome, float(fitness), self.origin)

    def as_elite(self) -> "Individual":
        """Same chromosome and fitness, carried into the next generation."""
        return Individual(self.chromosome, self.fitness, Origin.ELITE)


class Population:
    """
    Fixed-size ordered collection of individuals.

    After :meth:`rank` the members are sorted ascending by fitness.  The sort
    is stable, so on equal fitness the construction order (elites, then
    mutants, then children) is preserved.
    """

    def __init__(self, members: list[Individual]) -> None:
        if not members:
            raise ValueError("population must not be empty")
        self._members = list(members)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._members)

    def __getitem__(self, index: int) -> Individual:
        return self._members[index]

    @property
    def members(self) -> list[Individual]:
        return list(self._members)

    @property
    def chromosome_length(self) -> int:
        return len(self._members[0].chromosome)

    def unevaluated(self) -> list[int]:
        """Indices of members without a fitness, in population order."""
        return [i for i, m in enumerate(self._members) if not m.evaluated]

    def assign(self, indices: list[int], fitnesses: list[float]) -> None:
        if len(indices) != len(fitnesses):
            raise ValueError(
                f"got {len(fitnesses)} fitness values for {len(indices)} chromosomes"
            )
        for i, fit in zip(indices, fitnesses):
            self._members[i] = self._members[i].with_fitness(fit)

    def rank(self) -> None:
        """Stable ascending sort by fitness (all members must be evaluated)."""
        missing = self.unevaluated()
        if missing:
            raise ValueError(f"{len(missing)} members have no fitness; evaluate first")
        self._members.sort(key=lambda m: m.fitness)

    def elites(self, count: int) -> list[Individual]:
        return self._members[:count]

    def non_elites(self, count: int) -> list[Individual]:
        return self._members[count:]

    @property
    def best(self) -> Individual:
        return self._members[0]

    @property
    def fitnesses(self) -> np.ndarray:
        return np.array([m.fitness for m in self._members], dtype=float)

    def mean_fitness(self) -> float:
        return float(np.mean(self.fitnesses))
