"""Reduce a contestant's attempts to a single comparable result.

Each scoring method is a `ScoringRule`. Rules never raise for bad or missing
data: an attempt list that cannot produce a result degrades to a ``None``
value displayed as ``"-"`` (wrong number of attempts) or ``"DNF"`` (too many
non-finishes).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any, ClassVar, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from src.policies.registry import CategoryPolicy, ScoringMethod
from src.timing.formatter import DNF_TEXT, MISSING_TEXT, format_value
from src.timing.parser import Attempt, AttemptIssue, parse_attempts


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultSummary:
    """Outcome of scoring one attempt list."""

    method: ScoringMethod
    value: float | None
    display: str
    secondary_value: float | None = None
    secondary_display: str | None = None
    dropped_indices: tuple[int, ...] = ()

    @property
    def is_degraded(self) -> bool:
        return self.value is None


def _counted_values(attempts: Sequence[Attempt]) -> NDArray[np.float64]:
    return np.fromiter(
        (a.value for a in attempts if not a.is_dnf),
        dtype=np.float64,
    )


class ScoringRule(ABC):
    """Base class for the per-method scoring algorithms."""

    method: ClassVar[ScoringMethod]

    def __init__(self, policy: CategoryPolicy) -> None:
        policy.validate()
        self.policy = policy

    @abstractmethod
    def score(self, attempts: Sequence[Attempt]) -> ResultSummary:
        """Return the result for `attempts`, in submission order."""

    def _format(self, value: float | None) -> str:
        return format_value(value, self.policy.is_move_count)

    def _has_expected_count(self, attempts: Sequence[Attempt]) -> bool:
        return len(attempts) == self.policy.attempts

    def _missing(self, **extra: Any) -> ResultSummary:
        return ResultSummary(method=self.method, value=None, display=MISSING_TEXT, **extra)

    def _dnf(self, **extra: Any) -> ResultSummary:
        return ResultSummary(method=self.method, value=None, display=DNF_TEXT, **extra)

    def _best_single(self, attempts: Sequence[Attempt]) -> tuple[float | None, str]:
        counted = [a for a in attempts if not a.is_dnf]
        if not counted:
            return None, DNF_TEXT
        values = _counted_values(counted)
        # argmin keeps the first of equal bests.
        best = counted[int(np.argmin(values))]
        return best.value, best.display_text


class BestSingleRule(ScoringRule):
    """Fastest counted attempt; the number of attempts is not checked."""

    method = ScoringMethod.BEST_SINGLE

    def score(self, attempts: Sequence[Attempt]) -> ResultSummary:
        value, display = self._best_single(attempts)
        if value is None:
            return self._dnf()
        return ResultSummary(method=self.method, value=value, display=display)


class MeanOfNRule(ScoringRule):
    """Plain mean of all N attempts; a single non-finish makes it DNF."""

    method = ScoringMethod.MEAN_OF_N

    def score(self, attempts: Sequence[Attempt]) -> ResultSummary:
        if not self._has_expected_count(attempts):
            return self._missing()
        if any(a.is_dnf for a in attempts):
            return self._dnf()
        mean = float(np.mean(_counted_values(attempts)))
        return ResultSummary(method=self.method, value=mean, display=self._format(mean))


class TrimmedAverageRule(ScoringRule):
    """Mean of the middle N-2 attempts after dropping the best and the worst.

    Attempts are ordered by value with non-finishes last. The sort is stable,
    so equal values (including several non-finishes) keep submission order and
    the dropped positions are deterministic.
    """

    method = ScoringMethod.TRIMMED_AVERAGE_OF_N

    def score(self, attempts: Sequence[Attempt]) -> ResultSummary:
        if not self._has_expected_count(attempts):
            return self._missing()

        keys = np.array([a.sort_value for a in attempts], dtype=np.float64)
        order = np.argsort(keys, kind="stable")
        dropped = (int(order[0]), int(order[-1]))
        middle = [attempts[int(i)] for i in order[1:-1]]

        if any(a.is_dnf for a in middle):
            return self._dnf(dropped_indices=dropped)

        mean = float(np.mean(_counted_values(middle)))
        return ResultSummary(
            method=self.method,
            value=mean,
            display=self._format(mean),
            dropped_indices=dropped,
        )


class BestSingleWithMeanRule(ScoringRule):
    """Ranked by best single, with the mean of all N shown as a secondary value.

    The mean is only computed when every attempt counted; nothing is dropped.
    """

    method = ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N

    def score(self, attempts: Sequence[Attempt]) -> ResultSummary:
        if not self._has_expected_count(attempts):
            return self._missing(secondary_display=MISSING_TEXT)

        value, display = self._best_single(attempts)

        secondary_value: float | None = None
        secondary_display = DNF_TEXT
        if not any(a.is_dnf for a in attempts):
            secondary_value = float(np.mean(_counted_values(attempts)))
            secondary_display = self._format(secondary_value)

        return ResultSummary(
            method=self.method,
            value=value,
            display=display,
            secondary_value=secondary_value,
            secondary_display=secondary_display,
        )


_RULES: dict[ScoringMethod, type[ScoringRule]] = {
    ScoringMethod.BEST_SINGLE: BestSingleRule,
    ScoringMethod.MEAN_OF_N: MeanOfNRule,
    ScoringMethod.TRIMMED_AVERAGE_OF_N: TrimmedAverageRule,
    ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N: BestSingleWithMeanRule,
}


def rule_for(policy: CategoryPolicy) -> ScoringRule:
    return _RULES[policy.scoring_method](policy)


def calculate(attempts: Sequence[Attempt], policy: CategoryPolicy) -> ResultSummary:
    """Score `attempts` under `policy`.

    An empty attempt list gives ``"-"`` for every method.
    """

    attempts = tuple(attempts)
    rule = rule_for(policy)
    if not attempts:
        if policy.scoring_method is ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N:
            return rule._missing(secondary_display=MISSING_TEXT)
        return rule._missing()

    summary = rule.score(attempts)
    if summary.is_degraded:
        logger.debug(
            "No countable %s result from %d attempts (expected %d): %s",
            policy.scoring_method.value,
            len(attempts),
            policy.attempts,
            summary.display,
        )
    return summary


@dataclass(frozen=True)
class ContestantResult:
    """One contestant's scored entry for a category and round.

    Instances are never updated in place; rescoring builds a new one.
    """

    name: str
    attempts: tuple[Attempt, ...]
    final_value: float | None
    final_display: str
    method: ScoringMethod
    round: int = 1
    secondary_value: float | None = None
    secondary_display: str | None = None
    dropped_indices: tuple[int, ...] = ()
    issues: tuple[AttemptIssue, ...] = field(default=(), compare=False)

    @property
    def has_result(self) -> bool:
        return self.final_value is not None

    def attempt_displays(self) -> list[str]:
        """Attempt texts in submission order, with trimmed attempts in brackets.

        The dropped best is bracketed only when it counted, and the dropped
        worst only when more than one attempt counted.
        """

        texts = [a.display_text for a in self.attempts]
        if self.method is not ScoringMethod.TRIMMED_AVERAGE_OF_N or not self.dropped_indices:
            return texts

        best_idx, worst_idx = self.dropped_indices
        counted = sum(1 for a in self.attempts if not a.is_dnf)
        if not self.attempts[best_idx].is_dnf:
            texts[best_idx] = f"({texts[best_idx]})"
        if counted > 1 and worst_idx != best_idx:
            texts[worst_idx] = f"({texts[worst_idx]})"
        return texts


def normalize_round(value: Any) -> int:
    """Round numbers default to 1 when missing."""

    if value in (None, "", 0):
        return 1
    try:
        round_no = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid round number: {value!r}") from exc
    if round_no < 1:
        raise ValueError(f"Round numbers must be positive, got {round_no}.")
    return round_no


def build_contestant_result(
    name: str,
    entries: Iterable[Any],
    policy: CategoryPolicy,
    *,
    round_no: Any = 1,
    strict: bool = False,
) -> ContestantResult:
    """Parse a contestant's raw entries and score them under `policy`.

    Entries may be raw strings, stored attempt mappings or `Attempt` objects.
    Malformed entries are dropped (and listed in `issues`) unless `strict`
    is set, in which case the `ParseError` propagates.
    """

    parsed = parse_attempts(entries, is_move_count=policy.is_move_count, strict=strict)
    summary = calculate(parsed.attempts, policy)
    return ContestantResult(
        name=name,
        attempts=parsed.attempts,
        final_value=summary.value,
        final_display=summary.display,
        method=summary.method,
        round=normalize_round(round_no),
        secondary_value=summary.secondary_value,
        secondary_display=summary.secondary_display,
        dropped_indices=summary.dropped_indices,
        issues=parsed.issues,
    )
