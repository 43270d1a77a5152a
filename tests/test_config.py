"""
Tests for PackerConfig validation and YAML loading.

Tests cover:
- Defaults and derived population counts
- Invalid values raise ConfigError before anything runs
- load_config reads YAML and applies keyword overrides
"""

import pytest

from brkga_packer.core.config import BinSpec, DecodingMode, PackerConfig, RotationMode, load_config
from brkga_packer.core.errors import ConfigError
from brkga_packer.core.models import expand_items
from brkga_packer.evolution.engine import BrkgaEngine


@pytest.fixture
def bin_spec():
    return BinSpec(width=10, depth=10, height=10)


class TestDefaults:
    def test_defaults(self, bin_spec):
        cfg = PackerConfig(bin=bin_spec)
        assert cfg.mode is DecodingMode.MINIMIZE_BINS
        assert cfg.rotation is RotationMode.ALL
        assert cfg.elite_fraction == pytest.approx(0.10)
        assert cfg.mutant_fraction == pytest.approx(0.15)
        assert cfg.inherit_elite_probability == pytest.approx(0.70)
        assert cfg.max_generations == 200
        assert cfg.stagnation_window == 5
        assert cfg.parallel is False

    def test_population_defaults_to_factor_times_boxes(self, bin_spec):
        assert PackerConfig(bin=bin_spec).resolve_population_size(12) == 120
        assert PackerConfig(bin=bin_spec, population_size=7).resolve_population_size(12) == 7

    @pytest.mark.parametrize("size, elites, mutants", [
        (100, 10, 15),
        (5, 1, 0),
        (1, 1, 0),
        (30, 3, 4),
    ])
    def test_counts(self, bin_spec, size, elites, mutants):
        cfg = PackerConfig(bin=bin_spec)
        assert cfg.num_elites(size) == elites
        assert cfg.num_mutants(size) == mutants

    def test_mutants_capped_by_remaining_slots(self, bin_spec):
        cfg = PackerConfig(bin=bin_spec, elite_fraction=0.5, mutant_fraction=0.5)
        assert cfg.num_elites(3) == 1
        assert cfg.num_mutants(3) == 1

    def test_frozen(self, bin_spec):
        cfg = PackerConfig(bin=bin_spec)
        with pytest.raises(Exception):
            cfg.seed = 3

    def test_enum_from_string(self, bin_spec):
        cfg = PackerConfig(bin=bin_spec, mode="fixed_bins", rotation="none")
        assert cfg.mode is DecodingMode.FIXED_BINS
        assert not cfg.allow_rotation


class TestValidation:
    def test_fractions_beyond_population(self, bin_spec):
        with pytest.raises(ConfigError, match="exceeds 1"):
            PackerConfig(bin=bin_spec, elite_fraction=0.6, mutant_fraction=0.6, population_size=100)

    def test_engine_rejects_fractions_before_any_generation(self):
        boxes = expand_items([(1, 1, 1, 8)])
        with pytest.raises(ConfigError):
            BrkgaEngine(boxes, {
                "bin": {"width": 2, "depth": 2, "height": 2},
                "elite_fraction": 0.6,
                "mutant_fraction": 0.6,
                "population_size": 100,
            })

    @pytest.mark.parametrize("field, value", [
        ("elite_fraction", 1.5),
        ("mutant_fraction", -0.1),
        ("inherit_elite_probability", 2.0),
        ("population_size", 0),
        ("max_generations", 0),
        ("stagnation_window", 0),
        ("max_bins", 0),
        ("workers", 0),
    ])
    def test_out_of_range(self, bin_spec, field, value):
        with pytest.raises(ConfigError, match=field):
            PackerConfig(bin=bin_spec, **{field: value})

    @pytest.mark.parametrize("dims", [(0, 1, 1), (1, -2, 1), (1, 1, 0)])
    def test_non_positive_bin(self, dims):
        with pytest.raises(ConfigError):
            BinSpec(width=dims[0], depth=dims[1], height=dims[2])

    def test_unknown_key(self, bin_spec):
        with pytest.raises(ConfigError, match="colour"):
            PackerConfig(bin=bin_spec, colour="red")

    def test_config_error_is_value_error(self, bin_spec):
        with pytest.raises(ValueError):
            PackerConfig(bin=bin_spec, population_size=0)


class TestLoadConfig:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(
            "bin: {width: 3, depth: 4, height: 5}\n"
            "mode: fixed_bins\n"
            "max_bins: 2\n"
            "seed: 9\n"
        )
        cfg = load_config(path)
        assert cfg.bin.dims == (3, 4, 5)
        assert cfg.mode is DecodingMode.FIXED_BINS
        assert cfg.max_bins == 2
        assert cfg.seed == 9

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("bin: {width: 1, depth: 1, height: 1}\nseed: 9\n")
        cfg = load_config(path, seed=1, workers=None)
        assert cfg.seed == 1
        assert cfg.workers is None

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_invalid_value_in_file(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text("bin: {width: 1, depth: 1, height: 1}\nelite_fraction: 3\n")
        with pytest.raises(ConfigError):
            load_config(path)
