"""
Deterministic random streams.

Every stochastic draw of a run comes from a generator derived from
``(seed, stream, generation, slot)`` through numpy's SeedSequence, so a draw
never depends on how many workers evaluated the previous generation or in
which order they finished.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class Stream(IntEnum):
    """Independent sub-streams of a run."""

    INITIAL = 0
    MUTANT = 1
    CROSSOVER = 2


def resolve_seed(seed: int | None) -> int:
    """Return *seed*, or draw one from OS entropy when it is None."""
    if seed is not None:
        return int(seed)
    return int(np.random.SeedSequence().entropy % (2 ** 63))


def derive_rng(seed: int, stream: Stream, generation: int, slot: int) -> np.random.Generator:
    """Generator for one population slot of one generation."""
    sequence = np.random.SeedSequence(
        entropy=seed, spawn_key=(int(stream), generation, slot),
    )
    return np.random.Generator(np.random.PCG64(sequence))


def random_keys(rng: np.random.Generator, length: int) -> np.ndarray:
    """Uniform random-key vector in [0, 1), read-only."""
    keys = rng.random(length)
    keys.flags.writeable = False
    return keys
