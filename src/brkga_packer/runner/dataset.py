"""Item loading and random instance generation."""

from __future__ import annotations

import csv
import random
from pathlib import Path

from brkga_packer.core.errors import DatasetError
from brkga_packer.core.models import Item

REQUIRED_COLUMNS = ("height", "depth", "width", "count")


def load_items_csv(path: Path | str) -> list[Item]:
    """
    Load item rows from a CSV file.

    The header row is required and must name the columns ``height``,
    ``depth``, ``width`` and ``count`` (any order, case and surrounding
    whitespace ignored).  Extra columns are ignored.

    Args:
        path: CSV file path

    Returns:
        One Item per data row, in file order

    Raises:
        DatasetError: If a column is missing or a value is not a positive number
    """
    path = Path(path)
    with path.open("r", newline="") as f:
        reader = csv.reader(f)
        try:
            header = next(reader)
        except StopIteration:
            raise DatasetError(f"{path}: empty file, expected a header row") from None

        columns = {name.strip().lower(): i for i, name in enumerate(header)}
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise DatasetError(f"{path}: missing column(s) {', '.join(missing)}")

        items = []
        for line_no, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            items.append(_parse_row(path, line_no, row, columns))
    return items


def _parse_row(path: Path, line_no: int, row: list[str], columns: dict[str, int]) -> Item:
    values = {}
    for name in REQUIRED_COLUMNS:
        idx = columns[name]
        raw = row[idx].strip() if idx < len(row) else ""
        try:
            value = int(raw) if name == "count" else float(raw)
        except ValueError:
            raise DatasetError(f"{path}:{line_no}: {name}={raw!r} is not a number") from None
        if value <= 0:
            raise DatasetError(f"{path}:{line_no}: {name} must be positive, got {raw}")
        values[name] = value
    return Item(**values)


def generate_items(
    kinds: int = 10,
    seed: int | None = None,
    min_dim: int = 5,
    max_dim: int = 25,
    max_count: int = 5,
) -> list[Item]:
    """
    Generate a random item table for experimentation.

    Args:
        kinds: Number of distinct item rows
        seed: Random seed for reproducibility (default: None)
        min_dim: Smallest side length (inclusive)
        max_dim: Largest side length (inclusive)
        max_count: Largest count per row

    Returns:
        List of Item rows with integer dimensions
    """
    if min_dim <= 0 or max_dim < min_dim:
        raise DatasetError(f"invalid dimension range [{min_dim}, {max_dim}]")
    rng = random.Random(seed)

    items = []
    for _ in range(kinds):
        items.append(Item(
            height=rng.randint(min_dim, max_dim),
            depth=rng.randint(min_dim, max_dim),
            width=rng.randint(min_dim, max_dim),
            count=rng.randint(1, max_count),
        ))
    return items


def save_items_csv(items: list[Item], path: Path | str) -> None:
    """Write items in the format read by :func:`load_items_csv`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(REQUIRED_COLUMNS)
        for item in items:
            writer.writerow([item.height, item.depth, item.width, item.count])
