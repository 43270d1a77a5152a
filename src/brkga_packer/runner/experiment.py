"""Packing run orchestration and the ``brkga-pack`` command line."""

from __future__ import annotations

import argparse
import asyncio
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from brkga_packer.core.config import BinSpec, PackerConfig, load_config
from brkga_packer.core.errors import ConfigError, DatasetError, InfeasibleItemError
from brkga_packer.core.models import Item, expand_items
from brkga_packer.evolution.engine import BrkgaEngine, PackingResult
from brkga_packer.monitoring.metrics import (
    RunMetrics,
    export_placements_csv,
    export_to_csv,
    export_to_json,
    print_summary,
)
from brkga_packer.monitoring.progress import GenerationLogger
from brkga_packer.monitoring.telegram_notifier import (
    format_error,
    format_final_summary,
    format_run_start,
    send_telegram,
    telegram_enabled,
)
from brkga_packer.runner.dataset import generate_items, load_items_csv


def pack_items(
    items: Iterable[Item | tuple],
    config: PackerConfig,
    progress: GenerationLogger | None = None,
    cancel: threading.Event | None = None,
) -> PackingResult:
    """
    Pack an item table and return the best placement found.

    Args:
        items: Item rows or ``(height, depth, width, count)`` tuples.
        config: Run configuration.
        progress: Optional generation logger.
        cancel: Optional event; setting it stops the run at the next generation.

    Returns:
        PackingResult of the global best.
    """
    boxes = expand_items(items)
    with BrkgaEngine(boxes, config, progress=progress) as engine:
        return engine.run(cancel)


class PackingRunner:
    """
    Runs one packing job end to end.

    Expands the items, runs the engine off the event loop, writes the
    report files and sends Telegram start/finish notifications when
    credentials are configured.
    """

    def __init__(
        self,
        results_dir: Path | str = "results",
        send_telegram_updates: bool = True,
    ):
        self.results_dir = Path(results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.send_telegram_updates = send_telegram_updates and telegram_enabled()

    async def run(
        self,
        items: Sequence[Item],
        config: PackerConfig,
        run_id: str | None = None,
        cancel: threading.Event | None = None,
    ) -> tuple[RunMetrics, PackingResult]:
        """
        Pack *items* and save the report.

        Flow:
            1. Build the engine (configuration and item feasibility errors
               surface here, before any generation)
            2. Send start notification
            3. Run the engine in a worker thread
            4. Save JSON/CSV reports, send final summary, print summary
        """
        run_id = run_id or f"run_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        boxes = expand_items(items)
        logger = GenerationLogger(verbose=config.verbose, every=config.log_every)

        try:
            engine = BrkgaEngine(boxes, config, progress=logger)
        except InfeasibleItemError as exc:
            if self.send_telegram_updates:
                await send_telegram(format_error(type(exc).__name__, str(exc), {"box_id": exc.box_id}))
            raise

        if self.send_telegram_updates:
            await send_telegram(format_run_start(
                num_boxes=len(boxes),
                population_size=engine.population_size,
                mode=config.mode.value,
                bin_dims=config.bin.dims,
                seed=engine.seed,
            ))

        # engine.run closes the evaluator itself, on the worker thread.
        cancel = cancel or threading.Event()
        try:
            result = await asyncio.to_thread(engine.run, cancel)
        except asyncio.CancelledError:
            # Stop the engine thread at its next generation boundary.
            cancel.set()
            raise

        metrics = RunMetrics.from_result(
            run_id, result, mode=config.mode.value, population_size=engine.population_size,
        )
        self._save_results(metrics, result)

        if self.send_telegram_updates:
            await send_telegram(format_final_summary(
                bins_used=metrics.bins_used,
                total_boxes=metrics.num_boxes,
                utilization_pct=metrics.utilization_pct,
                runtime_seconds=metrics.runtime_seconds,
                generations=metrics.generations,
                termination=metrics.termination,
            ))

        print(print_summary(metrics))
        return metrics, result

    def _save_results(self, metrics: RunMetrics, result: PackingResult) -> None:
        """Write ``<run_id>.json``, ``<run_id>_bins.csv`` and ``<run_id>_placements.csv``."""
        json_path = self.results_dir / f"{metrics.run_id}.json"
        export_to_json(metrics, json_path, result=result)

        csv_path = self.results_dir / f"{metrics.run_id}_bins.csv"
        export_to_csv(metrics, csv_path)

        placements_path = self.results_dir / f"{metrics.run_id}_placements.csv"
        export_placements_csv(result, placements_path)

        print(f"✓ Saved results to {json_path}, {csv_path} and {placements_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brkga-pack",
        description="Pack boxes into bins with a biased random-key genetic algorithm",
    )
    parser.add_argument(
        "items", nargs="?",
        help="CSV file with height, depth, width, count columns",
    )
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument(
        "--bin", nargs=3, type=float, metavar=("W", "D", "H"),
        help="Bin width, depth and height (when no --config is given)",
    )
    parser.add_argument(
        "--generate", type=int, metavar="KINDS",
        help="Pack a random instance with KINDS item rows instead of a CSV file",
    )
    parser.add_argument("--out", default="results", help="Output directory (default: results)")
    parser.add_argument("--seed", type=int, help="Override the configured seed")
    parser.add_argument("--workers", type=int, help="Parallel workers (enables parallel evaluation)")
    parser.add_argument("--verbose", action="store_true", help="Print per-generation progress")
    parser.add_argument("--no-telegram", action="store_true", help="Disable Telegram notifications")
    return parser


def _config_from_args(args: argparse.Namespace) -> PackerConfig:
    overrides = {"seed": args.seed, "workers": args.workers}
    if args.workers is not None:
        overrides["parallel"] = True
    if args.verbose:
        overrides["verbose"] = True
    if args.bin is not None:
        overrides["bin"] = BinSpec(width=args.bin[0], depth=args.bin[1], height=args.bin[2])

    if args.config:
        return load_config(args.config, **overrides)
    if args.bin is None:
        raise ConfigError("either --config or --bin W D H is required")
    return PackerConfig(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    """Console entry point for ``brkga-pack``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.items is None and args.generate is None:
        parser.error("an items CSV file or --generate KINDS is required")

    try:
        config = _config_from_args(args)
        if args.items is not None:
            items = load_items_csv(args.items)
        else:
            items = generate_items(kinds=args.generate, seed=args.seed)
        runner = PackingRunner(results_dir=args.out, send_telegram_updates=not args.no_telegram)
        metrics, _ = asyncio.run(runner.run(items, config))
    except (ConfigError, DatasetError, InfeasibleItemError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print("\n🎉 Packing complete!")
    print(f"   Bins used: {metrics.bins_used}")
    print(f"   Utilization: {metrics.utilization_pct:.1f}%")
    print(f"   Runtime: {metrics.runtime_seconds:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
