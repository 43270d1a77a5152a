"""Item loading, run orchestration and the command line."""

from brkga_packer.runner.dataset import generate_items, load_items_csv, save_items_csv
from brkga_packer.runner.experiment import PackingRunner, main, pack_items

__all__ = [
    "generate_items",
    "load_items_csv",
    "save_items_csv",
    "PackingRunner",
    "main",
    "pack_items",
]
