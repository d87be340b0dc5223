"""Attempt parsing and value formatting."""

from src.timing.formatter import DNF_TEXT, MISSING_TEXT, PENALTY_MARKER, format_value
from src.timing.parser import (
    PENALTY_SECONDS,
    Attempt,
    AttemptIssue,
    AttemptStatus,
    ParsedAttempts,
    ParseError,
    coerce_attempt,
    parse_attempt,
    parse_attempts,
    split_entry_line,
)

__all__ = [
    "Attempt",
    "AttemptIssue",
    "AttemptStatus",
    "ParsedAttempts",
    "ParseError",
    "PENALTY_SECONDS",
    "coerce_attempt",
    "parse_attempt",
    "parse_attempts",
    "split_entry_line",
    "format_value",
    "DNF_TEXT",
    "MISSING_TEXT",
    "PENALTY_MARKER",
]
