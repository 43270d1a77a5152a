"""Monitoring for brkga-packer.

Provides generation logging, run metrics export and Telegram notifications.
"""

from .metrics import (
    BinMetrics,
    RunMetrics,
    export_placements_csv,
    export_to_csv,
    export_to_json,
    print_summary,
)
from .progress import GenerationLogger
from .telegram_notifier import (
    format_error,
    format_final_summary,
    format_run_start,
    send_telegram,
    telegram_enabled,
)

__all__ = [
    # Metrics
    "BinMetrics",
    "RunMetrics",
    "export_placements_csv",
    "export_to_csv",
    "export_to_json",
    "print_summary",
    # Progress
    "GenerationLogger",
    # Telegram
    "send_telegram",
    "telegram_enabled",
    "format_run_start",
    "format_error",
    "format_final_summary",
]
