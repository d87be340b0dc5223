"""Parse free-form attempt entries into normalized values.

Accepted entries (case-insensitive, surrounding whitespace ignored):
- ``DNF`` for a non-finish,
- plain seconds such as ``5.89`` or ``12``,
- ``M:SS(.ss)`` and ``H:MM:SS(.ss)`` clock times,
- whole move counts such as ``28``,
- any of the numeric forms with a trailing ``+`` for a 2 second penalty.

The parser knows nothing about categories. The ``is_move_count`` flag only
changes how the display text is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
import re
from typing import Any, Iterable, Mapping

from src.timing.formatter import DNF_TEXT, PENALTY_MARKER, format_penalized, format_value


logger = logging.getLogger(__name__)

PENALTY_SECONDS = 2.0

_SECONDS_RE = re.compile(r"^\d+\.?\d*$", re.ASCII)
_MINUTES_RE = re.compile(r"^(?P<minutes>\d+):(?P<seconds>\d+(?:\.\d+)?)$", re.ASCII)
_HOURS_RE = re.compile(
    r"^(?P<hours>\d+):(?P<minutes>\d+):(?P<seconds>\d+(?:\.\d+)?)$",
    re.ASCII,
)


class AttemptStatus(str, Enum):
    """Outcome of a single attempt."""

    NORMAL = "normal"
    PENALIZED = "plus2"
    NON_FINISH = "dnf"


class ParseError(ValueError):
    """Raised when an attempt entry does not match any accepted notation."""

    def __init__(self, reason: str, raw_text: Any = None, *, index: int | None = None) -> None:
        self.reason = reason
        self.raw_text = raw_text
        self.index = index
        super().__init__(self._compose())

    def _compose(self) -> str:
        prefix = f"Attempt {self.index}: " if self.index is not None else ""
        if self.raw_text is None:
            return f"{prefix}{self.reason}"
        return f"{prefix}{self.reason} ({self.raw_text!r})"

    def at_index(self, index: int) -> "ParseError":
        """Return a copy of this error tagged with the 1-based attempt index."""

        return ParseError(self.reason, self.raw_text, index=index)


@dataclass(frozen=True)
class Attempt:
    """One submitted attempt after parsing.

    `value` is ``None`` exactly when the attempt is a non-finish. For a
    penalized attempt it already includes the penalty; `base_value` keeps the
    value as entered.
    """

    raw_text: str
    value: float | None
    status: AttemptStatus
    display_text: str
    base_value: float | None = None

    @property
    def is_dnf(self) -> bool:
        return self.status is AttemptStatus.NON_FINISH

    @property
    def is_penalized(self) -> bool:
        return self.status is AttemptStatus.PENALIZED

    @property
    def sort_value(self) -> float:
        """Ascending sort key; non-finishes sort after every finite value."""

        return float("inf") if self.value is None else self.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw": self.raw_text,
            "time": self.value,
            "status": self.status.value,
            "display": self.display_text,
            "original_time": self.base_value,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, is_move_count: bool = False) -> "Attempt":
        """Rebuild an attempt from its stored form.

        Stored attempts carry ``time``/``status``/``display``; a stored entry
        with only a ``raw`` string is parsed again.
        """

        if "time" not in payload and "status" not in payload:
            raw = payload.get("raw")
            if raw is None:
                raise ParseError("Stored attempt has neither a value nor raw text", dict(payload))
            return parse_attempt(raw, is_move_count=is_move_count)

        try:
            status = AttemptStatus(str(payload.get("status", AttemptStatus.NORMAL.value)).lower())
        except ValueError as exc:
            raise ParseError("Unknown attempt status", payload.get("status")) from exc

        if status is AttemptStatus.NON_FINISH:
            return _dnf(str(payload.get("raw", DNF_TEXT)))

        raw_value = payload.get("time")
        if raw_value is None:
            raise ParseError("Stored attempt is missing its value", dict(payload))
        try:
            value = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ParseError("Stored attempt value is not numeric", raw_value) from exc
        if value < 0 or math.isnan(value) or math.isinf(value):
            raise ParseError("Stored attempt value must be a non-negative finite number", raw_value)

        base = payload.get("original_time")
        base_value = float(base) if base is not None else (
            value - PENALTY_SECONDS if status is AttemptStatus.PENALIZED else value
        )
        display = payload.get("display")
        if not display:
            display = (
                format_penalized(value, is_move_count)
                if status is AttemptStatus.PENALIZED
                else format_value(value, is_move_count)
            )
        return cls(
            raw_text=str(payload.get("raw", display)),
            value=value,
            status=status,
            display_text=str(display),
            base_value=base_value,
        )


@dataclass(frozen=True)
class AttemptIssue:
    """An entry dropped from a submission, with the reason it was dropped."""

    index: int
    raw_text: Any
    reason: str


@dataclass(frozen=True)
class ParsedAttempts:
    """Attempts parsed from one submission, in submission order."""

    attempts: tuple[Attempt, ...]
    issues: tuple[AttemptIssue, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.issues


def _dnf(raw_text: str) -> Attempt:
    return Attempt(
        raw_text=raw_text,
        value=None,
        status=AttemptStatus.NON_FINISH,
        display_text=DNF_TEXT,
        base_value=None,
    )


def _parse_number(text: str) -> float:
    """Parse one numeric notation into seconds (or moves)."""

    if not text:
        raise ParseError("Time must not be empty", text)

    # Also covers whole move counts.
    if _SECONDS_RE.match(text):
        return float(text)

    match = _MINUTES_RE.match(text)
    if match is not None:
        minutes = int(match.group("minutes"))
        seconds = float(match.group("seconds"))
        if seconds >= 60:
            raise ParseError("Seconds must be below 60 in M:SS notation", text)
        return minutes * 60 + seconds

    match = _HOURS_RE.match(text)
    if match is not None:
        hours = int(match.group("hours"))
        minutes = int(match.group("minutes"))
        seconds = float(match.group("seconds"))
        if minutes >= 60 or seconds >= 60:
            raise ParseError("Minutes and seconds must be below 60 in H:MM:SS notation", text)
        return hours * 3600 + minutes * 60 + seconds

    if text.startswith("-"):
        raise ParseError("Values cannot be negative", text)
    raise ParseError("Unsupported time format", text)


def parse_attempt(raw_text: str, *, is_move_count: bool = False) -> Attempt:
    """Parse one attempt entry.

    Raises:
        ParseError: if the entry matches none of the accepted notations.
    """

    if not isinstance(raw_text, str):
        raise ParseError("Attempt must be given as text", raw_text)

    text = raw_text.strip().upper()
    if not text:
        raise ParseError("Attempt must not be empty", raw_text)

    if text == DNF_TEXT:
        return _dnf(raw_text)

    penalized = text.endswith(PENALTY_MARKER)
    if penalized:
        text = text[: -len(PENALTY_MARKER)]

    try:
        base_value = _parse_number(text)
    except ParseError as exc:
        logger.debug("Rejected attempt %r: %s", raw_text, exc.reason)
        raise ParseError(exc.reason, raw_text) from None

    if penalized:
        value = base_value + PENALTY_SECONDS
        return Attempt(
            raw_text=raw_text,
            value=value,
            status=AttemptStatus.PENALIZED,
            display_text=format_penalized(value, is_move_count),
            base_value=base_value,
        )

    return Attempt(
        raw_text=raw_text,
        value=base_value,
        status=AttemptStatus.NORMAL,
        display_text=format_value(base_value, is_move_count),
        base_value=base_value,
    )


def coerce_attempt(entry: Any, *, is_move_count: bool = False) -> Attempt:
    """Accept a raw string, a stored mapping, or an already parsed `Attempt`."""

    if isinstance(entry, Attempt):
        return entry
    if isinstance(entry, Mapping):
        return Attempt.from_dict(entry, is_move_count=is_move_count)
    return parse_attempt(entry, is_move_count=is_move_count)


def split_entry_line(line: str) -> list[str]:
    """Split a whitespace or comma separated entry line into attempt tokens."""

    return [token for token in re.split(r"[\s,]+", line.strip()) if token]


def parse_attempts(
    entries: Iterable[Any],
    *,
    is_move_count: bool = False,
    strict: bool = False,
) -> ParsedAttempts:
    """Parse a whole submission.

    With ``strict=True`` the first bad entry raises `ParseError` tagged with its
    1-based index. Otherwise bad entries are dropped and reported as issues.
    """

    attempts: list[Attempt] = []
    issues: list[AttemptIssue] = []
    for index, entry in enumerate(entries, start=1):
        try:
            attempts.append(coerce_attempt(entry, is_move_count=is_move_count))
        except ParseError as exc:
            if strict:
                raise exc.at_index(index) from None
            logger.debug("Dropping attempt %d (%r): %s", index, entry, exc.reason)
            issues.append(AttemptIssue(index=index, raw_text=entry, reason=exc.reason))
    return ParsedAttempts(attempts=tuple(attempts), issues=tuple(issues))
