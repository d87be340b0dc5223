"""Aggregate views over scored results: category statistics, progress, summaries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from src.policies.registry import CategoryPolicy, ScoringMethod
from src.scoring.calculator import ContestantResult
from src.timing.formatter import DNF_TEXT, MISSING_TEXT, format_value


@dataclass(frozen=True)
class StandoutResult:
    """A notable result in a category together with who set it."""

    value: float
    display: str
    contestant: str


@dataclass(frozen=True)
class CategoryStats:
    """Summary numbers for one category's results."""

    total_participants: int
    valid_results: int
    best: StandoutResult | None
    worst: StandoutResult | None
    mean_value: float | None
    mean_display: str
    scoring_method: ScoringMethod


def category_stats(results: Sequence[ContestantResult], policy: CategoryPolicy) -> CategoryStats:
    """Best, worst and mean over the contestants that have a result.

    Ties for best or worst go to the earliest contestant in `results`.
    """

    valid = [r for r in results if r.final_value is not None]
    if not valid:
        return CategoryStats(
            total_participants=len(results),
            valid_results=0,
            best=None,
            worst=None,
            mean_value=None,
            mean_display=MISSING_TEXT,
            scoring_method=policy.scoring_method,
        )

    values = np.array([r.final_value for r in valid], dtype=np.float64)
    best = valid[int(np.argmin(values))]
    worst = valid[int(np.argmax(values))]
    mean_value = float(np.mean(values))
    return CategoryStats(
        total_participants=len(results),
        valid_results=len(valid),
        best=StandoutResult(float(best.final_value), best.final_display, best.name),
        worst=StandoutResult(float(worst.final_value), worst.final_display, worst.name),
        mean_value=mean_value,
        mean_display=format_value(mean_value, policy.is_move_count),
        scoring_method=policy.scoring_method,
    )


@dataclass(frozen=True)
class Progress:
    """Change between two results for the same contestant."""

    has_improvement: bool
    improvement: float | None
    display: str


def compare_progress(
    old: ContestantResult,
    new: ContestantResult,
    policy: CategoryPolicy | None = None,
) -> Progress:
    """Compare an earlier result with a later one.

    A positive improvement means the new result is faster (or fewer moves) and
    is shown as ``-X``; anything else is shown as ``+X``.
    """

    if old.final_value is None or new.final_value is None:
        return Progress(has_improvement=False, improvement=None, display=MISSING_TEXT)

    improvement = old.final_value - new.final_value
    is_moves = policy.is_move_count if policy is not None else False
    magnitude = format_value(abs(improvement), is_moves)
    has_improvement = improvement > 0
    sign = "-" if has_improvement else "+"
    return Progress(has_improvement=has_improvement, improvement=improvement, display=f"{sign}{magnitude}")


def score_summary(result: ContestantResult, policy: CategoryPolicy) -> str:
    """One line such as ``"Lin - 10.17 (average of 5)"``."""

    if result.final_value is None:
        return f"{result.name} - {DNF_TEXT}"
    return f"{result.name} - {result.final_display} ({policy.method_label})"
