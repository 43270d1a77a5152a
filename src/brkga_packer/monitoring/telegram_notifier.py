"""Lightweight Telegram notification for packing runs.

Sends plain-text messages to a Telegram chat via the Bot API for:
- Run start
- Errors
- Final results summary

Enabled only when TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID are set.
No retry logic: notifications are non-critical.
"""

from __future__ import annotations

import os
from typing import Any

import httpx


TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"


def telegram_enabled() -> bool:
    """True when both credentials are present in the environment."""
    return bool(os.environ.get("TELEGRAM_BOT_TOKEN") and os.environ.get("TELEGRAM_CHAT_ID"))


async def send_telegram(
    message: str,
    chat_id: str | None = None,
    token: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Send a plain-text message to a Telegram chat.

    Args:
        message: Text to send.
        chat_id: Telegram chat ID. Defaults to TELEGRAM_CHAT_ID env var.
        token: Bot token. Defaults to TELEGRAM_BOT_TOKEN env var.
        client: Existing AsyncClient to post with; a short-lived one is
            opened when omitted.

    Returns:
        True if the message was accepted, False otherwise (including when
        credentials are missing).

    Example:
        >>> import asyncio
        >>> asyncio.run(send_telegram("Run started: 120 boxes"))
        True
    """
    token = token or os.environ.get("TELEGRAM_BOT_TOKEN", "")
    if not token:
        return False

    chat_id = chat_id or os.environ.get("TELEGRAM_CHAT_ID", "")
    if not chat_id:
        return False

    url = TELEGRAM_API.format(token=token)
    payload = {"chat_id": chat_id, "text": message}

    try:
        if client is not None:
            resp = await client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=10.0) as own_client:
                resp = await own_client.post(url, json=payload)
        data = resp.json()
        return bool(data.get("ok", False))
    except (httpx.HTTPError, ValueError):
        return False


def format_run_start(
    num_boxes: int,
    population_size: int,
    mode: str,
    bin_dims: tuple[float, float, float],
    seed: int | None,
) -> str:
    """Format run start notification message.

    Example:
        >>> print(format_run_start(120, 1200, "minimize_bins", (30, 30, 30), 7))
        🚀 Packing Run Started
        Boxes: 120 (population 1200)
        Mode: minimize_bins
        Bin: 30 x 30 x 30
        Seed: 7
    """
    return (
        f"🚀 Packing Run Started\n"
        f"Boxes: {num_boxes} (population {population_size})\n"
        f"Mode: {mode}\n"
        f"Bin: {bin_dims[0]} x {bin_dims[1]} x {bin_dims[2]}\n"
        f"Seed: {seed}"
    )


def format_error(error_type: str, error_message: str, context: dict[str, Any] | None = None) -> str:
    """Format error notification message.

    Example:
        >>> print(format_error("InfeasibleItemError", "box 3 exceeds the bin", {"box_id": 3}))
        ⚠️ Error: InfeasibleItemError
        box 3 exceeds the bin
        Context: box_id=3
    """
    lines = [
        f"⚠️ Error: {error_type}",
        error_message,
    ]
    if context:
        ctx_str = ", ".join(f"{k}={v}" for k, v in context.items())
        lines.append(f"Context: {ctx_str}")
    return "\n".join(lines)


def format_final_summary(
    bins_used: int,
    total_boxes: int,
    utilization_pct: float,
    runtime_seconds: float,
    generations: int,
    termination: str | None,
) -> str:
    """Format final run results summary.

    Example:
        >>> print(format_final_summary(4, 120, 81.5, 90, 37, "stagnation"))
        ✅ Packing Run Complete
        Bins: 4
        Boxes: 120
        Utilization: 81.5%
        Generations: 37 (stagnation)
        Runtime: 1.5 minutes
    """
    runtime_minutes = runtime_seconds / 60
    return (
        f"✅ Packing Run Complete\n"
        f"Bins: {bins_used}\n"
        f"Boxes: {total_boxes}\n"
        f"Utilization: {utilization_pct:.1f}%\n"
        f"Generations: {generations} ({termination})\n"
        f"Runtime: {runtime_minutes:.1f} minutes"
    )
