"""
Tests for the chromosome/population model and the random streams.
"""

import numpy as np
import pytest

from brkga_packer.core.rng import Stream, derive_rng, random_keys, resolve_seed
from brkga_packer.evolution.population import Individual, Origin, Population, freeze


def individual(value, fitness=None, origin=Origin.INITIAL):
    return Individual(freeze(np.full(3, value)), fitness, origin)


class TestIndividual:
    def test_freeze_is_read_only(self):
        genes = freeze(np.zeros(4))
        with pytest.raises(ValueError):
            genes[0] = 1.0

    def test_freeze_copies_writeable_input(self):
        source = np.zeros(4)
        frozen = freeze(source)
        source[0] = 1.0
        assert frozen[0] == 0.0

    def test_with_fitness_keeps_chromosome(self):
        ind = individual(0.5)
        scored = ind.with_fitness(2)
        assert scored.chromosome is ind.chromosome
        assert scored.fitness == 2.0
        assert not ind.evaluated and scored.evaluated

    def test_as_elite(self):
        elite = individual(0.5, 1.0, Origin.CHILD).as_elite()
        assert elite.origin is Origin.ELITE
        assert elite.fitness == 1.0


class TestPopulation:
    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            Population([])

    def test_assign_and_rank(self):
        pop = Population([individual(0.1), individual(0.2), individual(0.3)])
        assert pop.unevaluated() == [0, 1, 2]
        pop.assign([0, 1, 2], [3.0, 1.0, 2.0])
        pop.rank()
        assert list(pop.fitnesses) == [1.0, 2.0, 3.0]
        assert pop.best.chromosome[0] == pytest.approx(0.2)
        assert pop.mean_fitness() == pytest.approx(2.0)

    def test_rank_is_stable(self):
        members = [
            individual(0.1, 1.0, Origin.ELITE),
            individual(0.2, 1.0, Origin.MUTANT),
            individual(0.3, 1.0, Origin.CHILD),
        ]
        pop = Population(members)
        pop.rank()
        assert [m.origin for m in pop] == [Origin.ELITE, Origin.MUTANT, Origin.CHILD]

    def test_rank_requires_fitness(self):
        pop = Population([individual(0.1, 1.0), individual(0.2)])
        with pytest.raises(ValueError, match="evaluate"):
            pop.rank()

    def test_assign_length_mismatch(self):
        pop = Population([individual(0.1)])
        with pytest.raises(ValueError):
            pop.assign([0], [1.0, 2.0])

    def test_elite_split(self):
        pop = Population([individual(v, v) for v in (0.1, 0.2, 0.3, 0.4)])
        assert len(pop.elites(1)) == 1
        assert len(pop.non_elites(1)) == 3
        assert pop.chromosome_length == 3


class TestRandomStreams:
    def test_same_key_same_draws(self):
        a = derive_rng(7, Stream.MUTANT, 3, 11).random(5)
        b = derive_rng(7, Stream.MUTANT, 3, 11).random(5)
        assert np.array_equal(a, b)

    @pytest.mark.parametrize("other", [
        (8, Stream.MUTANT, 3, 11),
        (7, Stream.CROSSOVER, 3, 11),
        (7, Stream.MUTANT, 4, 11),
        (7, Stream.MUTANT, 3, 12),
    ])
    def test_any_key_change_changes_draws(self, other):
        a = derive_rng(7, Stream.MUTANT, 3, 11).random(5)
        b = derive_rng(*other).random(5)
        assert not np.array_equal(a, b)

    def test_random_keys(self):
        keys = random_keys(derive_rng(1, Stream.INITIAL, 0, 0), 100)
        assert keys.shape == (100,)
        assert keys.min() >= 0.0 and keys.max() < 1.0
        assert not keys.flags.writeable

    def test_resolve_seed(self):
        assert resolve_seed(5) == 5
        drawn = resolve_seed(None)
        assert 0 <= drawn < 2 ** 63
