"""
Tests for pack_items, PackingRunner and the brkga-pack command line.
"""

import asyncio
import json
import threading

import pytest

from brkga_packer.core.config import PackerConfig
from brkga_packer.core.errors import ConfigError, DatasetError, InfeasibleItemError
from brkga_packer.evolution.engine import BrkgaEngine
from brkga_packer.runner.experiment import PackingRunner, main, pack_items


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    monkeypatch.delenv("TELEGRAM_CHAT_ID", raising=False)


@pytest.fixture
def items_csv(tmp_path):
    path = tmp_path / "items.csv"
    path.write_text("height,depth,width,count\n1,1,1,8\n")
    return path


class TestPackItems:
    def test_unit_cubes(self, cube_config):
        result = pack_items([(1, 1, 1, 8)], cube_config)
        assert result.summary.bins_used == 1
        assert result.best_fitness == pytest.approx(2.0)

    def test_oversized(self, cube_config):
        with pytest.raises(InfeasibleItemError):
            pack_items([(5, 1, 1, 1)], cube_config)

    @pytest.mark.parametrize("items", [[(1, 1, -1, 1), (1, 1, 1, 8)], [(0, 1, 1, 3)]])
    def test_degenerate_boxes_rejected(self, cube_config, items):
        with pytest.raises(DatasetError):
            pack_items(items, cube_config)


class TestPackingRunner:
    @pytest.mark.asyncio
    async def test_run_writes_reports(self, tmp_path, cube_config, capsys):
        runner = PackingRunner(results_dir=tmp_path)
        assert runner.send_telegram_updates is False
        metrics, result = await runner.run([(1, 1, 1, 8)], cube_config, run_id="cubes")

        assert metrics.bins_used == 1
        assert (tmp_path / "cubes.json").exists()
        assert (tmp_path / "cubes_bins.csv").exists()
        assert (tmp_path / "cubes_placements.csv").exists()
        assert "Run: cubes" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_cancel_leaves_shutdown_to_engine_thread(self, tmp_path, cube_bin, monkeypatch):
        closed_on = []
        original_close = BrkgaEngine.close

        def recording_close(engine):
            closed_on.append(threading.current_thread())
            original_close(engine)

        monkeypatch.setattr(BrkgaEngine, "close", recording_close)
        config = PackerConfig(bin=cube_bin, seed=1, population_size=20,
                              max_generations=100_000, stagnation_window=100_000)
        cancel = threading.Event()
        runner = PackingRunner(results_dir=tmp_path)
        task = asyncio.create_task(runner.run([(1, 1, 1, 8)], config, run_id="c", cancel=cancel))
        await asyncio.sleep(0.2)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert cancel.is_set()
        for _ in range(500):
            if closed_on:
                break
            await asyncio.sleep(0.01)
        assert closed_on
        assert all(t is not threading.main_thread() for t in closed_on)
        assert not (tmp_path / "c.json").exists()


class TestCli:
    def test_csv_with_bin(self, tmp_path, items_csv):
        out = tmp_path / "out"
        code = main([str(items_csv), "--bin", "2", "2", "2", "--seed", "3",
                     "--out", str(out), "--no-telegram"])
        assert code == 0
        (report,) = out.glob("*.json")
        data = json.loads(report.read_text())
        assert data["bins_used"] == 1
        assert data["seed"] == 3

    def test_yaml_config(self, tmp_path, items_csv):
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text("bin: {width: 2, depth: 2, height: 2}\npopulation_size: 10\nseed: 1\n")
        assert main([str(items_csv), "--config", str(cfg), "--out", str(tmp_path / "o")]) == 0

    def test_generated_instance(self, tmp_path):
        code = main(["--generate", "3", "--bin", "30", "30", "30", "--seed", "2",
                     "--out", str(tmp_path)])
        assert code == 0

    def test_oversized_item_exit_code(self, tmp_path, capsys):
        path = tmp_path / "big.csv"
        path.write_text("height,depth,width,count\n9,9,9,1\n")
        assert main([str(path), "--bin", "2", "2", "2", "--out", str(tmp_path)]) == 2
        assert "error:" in capsys.readouterr().err

    def test_missing_bin_and_config(self, items_csv, tmp_path):
        assert main([str(items_csv), "--out", str(tmp_path)]) == 2

    def test_no_input(self):
        with pytest.raises(SystemExit):
            main([])

    def test_config_error_type(self):
        with pytest.raises(ConfigError):
            PackerConfig(bin={"width": -1, "depth": 1, "height": 1})
