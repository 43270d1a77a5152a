"""
Run configuration for the packer.

PackerConfig is the only object that carries tuneable parameters; it is
validated once when it is built (pydantic), frozen afterwards, and passed
read-only to the decoder, the evaluators and the engine.

Classes:
    DecodingMode — bin-count minimization or fixed-bin utilization
    RotationMode — which box rotations the decoder may use
    BinSpec      — physical bin dimensions
    PackerConfig — all parameters of a single packing run

Usage:
    config = load_config("configs/default.yaml", seed=7)
    config = PackerConfig(bin=BinSpec(width=30, depth=30, height=30))
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from brkga_packer.core.errors import ConfigError


class DecodingMode(str, Enum):
    """How the decoder treats the bin budget and what fitness measures."""

    MINIMIZE_BINS = "minimize_bins"
    FIXED_BINS = "fixed_bins"


class RotationMode(str, Enum):
    """Rotations the decoder may apply to a box."""

    NONE = "none"
    UPRIGHT = "upright"
    ALL = "all"


def _format_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


class _FrozenModel(BaseModel):
    """Base model raising ConfigError instead of pydantic's ValidationError."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigError(_format_errors(exc)) from exc


class BinSpec(_FrozenModel):
    """Bin dimensions along x (width), y (depth) and z (height)."""

    width: float = Field(gt=0)
    depth: float = Field(gt=0)
    height: float = Field(gt=0)

    @property
    def dims(self) -> tuple[float, float, float]:
        return (self.width, self.depth, self.height)

    @property
    def volume(self) -> float:
        return self.width * self.depth * self.height


class PackerConfig(_FrozenModel):
    """
    All parameters for a single packing run.

    Population sizing follows the usual BRKGA recipe: a small elite set
    carried over unchanged, a mutant set of fresh random chromosomes, and
    crossover offspring for the rest.  When ``population_size`` is omitted
    it is ``population_factor`` times the number of boxes.
    """

    bin: BinSpec
    mode: DecodingMode = DecodingMode.MINIMIZE_BINS
    max_bins: int = Field(default=1, ge=1, description="Bin budget in fixed_bins mode")
    rotation: RotationMode = RotationMode.ALL

    # Evolution
    population_size: int | None = Field(default=None, gt=0)
    population_factor: int = Field(default=10, gt=0)
    elite_fraction: float = Field(default=0.10, ge=0.0, le=1.0)
    mutant_fraction: float = Field(default=0.15, ge=0.0, le=1.0)
    inherit_elite_probability: float = Field(default=0.70, ge=0.0, le=1.0)
    max_generations: int = Field(default=200, gt=0)
    stagnation_window: int = Field(default=5, gt=0)
    target_fitness: float | None = None
    seed: int | None = Field(default=None, ge=0)

    # Evaluation
    parallel: bool = False
    workers: int | None = Field(default=None, ge=1)

    # Output
    validate_best: bool = True
    verbose: bool = False
    log_every: int = Field(default=10, gt=0)

    @model_validator(mode="after")
    def _check_fractions(self) -> "PackerConfig":
        if self.elite_fraction + self.mutant_fraction > 1.0 + 1e-12:
            raise ValueError(
                f"elite_fraction + mutant_fraction = "
                f"{self.elite_fraction + self.mutant_fraction:.3f} exceeds 1 "
                f"(elites and mutants would not fit in the population)"
            )
        return self

    @property
    def allow_rotation(self) -> bool:
        return self.rotation is not RotationMode.NONE

    def resolve_population_size(self, num_boxes: int) -> int:
        if self.population_size is not None:
            return self.population_size
        return max(1, self.population_factor * num_boxes)

    def num_elites(self, population_size: int) -> int:
        """Elite count: at least one, at most the population size."""
        return min(population_size, max(1, int(self.elite_fraction * population_size)))

    def num_mutants(self, population_size: int) -> int:
        elites = self.num_elites(population_size)
        return min(int(self.mutant_fraction * population_size), population_size - elites)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def load_config(path: str | Path, **overrides: Any) -> PackerConfig:
    """
    Load a PackerConfig from a YAML mapping.

    Keyword overrides take precedence over values in the file (the CLI uses
    this for ``--seed`` and ``--workers``).

    Raises:
        ConfigError: if the file is not a mapping or a value is invalid.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return PackerConfig(**data)
