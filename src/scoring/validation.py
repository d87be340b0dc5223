"""Data-entry checks for a contestant's submission.

These checks are stricter than scoring: the calculator quietly degrades bad
input, while `validate_submission` explains what is wrong so the entry can be
corrected before it is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from src.policies.registry import CategoryPolicy, ScoringMethod
from src.timing.parser import Attempt, ParseError, coerce_attempt


@dataclass(frozen=True)
class SubmissionCheck:
    """Outcome of validating one submission."""

    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _is_blank(entry: Any) -> bool:
    return isinstance(entry, str) and not entry.strip()


def validate_submission(
    name: str | None,
    entries: Sequence[Any],
    policy: CategoryPolicy,
) -> SubmissionCheck:
    """Check a submission against `policy`, collecting every problem found."""

    errors: list[str] = []

    if not name or not name.strip():
        errors.append("Contestant name must not be empty.")

    if not entries:
        errors.append("At least one attempt is required.")
    elif len(entries) > policy.attempts:
        errors.append(
            f"At most {policy.attempts} attempts are allowed for "
            f"{policy.display_name or 'this category'}."
        )

    parsed: list[Attempt] = []
    for index, entry in enumerate(entries, start=1):
        if _is_blank(entry):
            continue
        try:
            attempt = coerce_attempt(entry, is_move_count=policy.is_move_count)
        except ParseError as exc:
            errors.append(f"Attempt {index} is malformed: {exc.reason}.")
            continue
        parsed.append(attempt)

        if attempt.is_dnf and not policy.allows_dnf:
            errors.append(f"Attempt {index}: DNF is not accepted in this category.")
        if attempt.is_penalized and not policy.allows_penalty:
            errors.append(f"Attempt {index}: +2 penalties are not accepted in this category.")
        if (
            policy.is_move_count
            and attempt.base_value is not None
            and not float(attempt.base_value).is_integer()
        ):
            errors.append(f"Attempt {index}: move counts must be whole numbers.")

    counted = sum(1 for a in parsed if not a.is_dnf)
    if policy.scoring_method is ScoringMethod.TRIMMED_AVERAGE_OF_N:
        needed = policy.attempts - 2
        if counted < needed:
            errors.append(f"A trimmed average needs at least {needed} finished attempts.")
    elif policy.scoring_method is ScoringMethod.MEAN_OF_N and entries and counted == 0:
        errors.append("A mean needs at least one finished attempt.")

    return SubmissionCheck(errors=tuple(errors))
