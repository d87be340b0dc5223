"""Render normalized values back into the club's textual conventions."""

from __future__ import annotations

import math


MISSING_TEXT = "-"
DNF_TEXT = "DNF"
PENALTY_MARKER = "+"


def _seconds_field(seconds: float, *, width: int) -> tuple[str, int]:
    """Format the seconds field, returning the text and a carry of 0 or 1 minutes."""

    text = f"{seconds:.2f}"
    # 59.996 rounds up to "60.00"; carry it into the minutes instead.
    if text.startswith("60."):
        return "0.00".zfill(width), 1
    return text.zfill(width), 0


def format_value(value: float | None, is_move_count: bool = False) -> str:
    """Format seconds (or a move count) for display.

    - ``None`` -> ``"-"``; ``+inf`` -> ``"DNF"``.
    - Move counts: whole numbers without decimals, averages with two.
    - Times: ``S.ss`` below a minute, ``M:SS.ss`` below an hour,
      ``H:MM:SS.ss`` beyond.
    """

    if value is None:
        return MISSING_TEXT
    value = float(value)
    if math.isnan(value):
        return MISSING_TEXT
    if math.isinf(value) and value > 0:
        return DNF_TEXT

    if is_move_count:
        if value < 0 or math.isinf(value):
            return MISSING_TEXT
        return str(int(value)) if value.is_integer() else f"{value:.2f}"

    if value < 0:
        return MISSING_TEXT

    if value < 60:
        return f"{value:.2f}"

    if value < 3600:
        minutes, remainder = divmod(value, 60)
        seconds_text, carry = _seconds_field(remainder, width=5)
        if int(minutes) + carry == 60:
            return f"1:00:{seconds_text}"
        return f"{int(minutes) + carry}:{seconds_text}"

    hours, remainder = divmod(value, 3600)
    minutes, seconds = divmod(remainder, 60)
    seconds_text, carry = _seconds_field(seconds, width=5)
    minutes = int(minutes) + carry
    hours = int(hours)
    if minutes == 60:
        hours += 1
        minutes = 0
    return f"{hours}:{minutes:02d}:{seconds_text}"


def format_penalized(value: float, is_move_count: bool = False) -> str:
    """Format a penalized attempt, which carries a trailing penalty marker."""

    return f"{format_value(value, is_move_count)}{PENALTY_MARKER}"
