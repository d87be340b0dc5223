"""Order contestants and assign competition ranks.

Results are sorted ascending by final value with missing results last. Ranks
follow the sorted position (1-based); an entry whose value equals the
previous entry's value inherits the previous rank, so ``[9.5, 9.5, 10.0]``
ranks ``1, 1, 3``. Entries without a result get the `UNRANKED` marker.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable, Mapping, Sequence

import numpy as np

from src.policies.registry import CategoryPolicy
from src.scoring.calculator import ContestantResult, build_contestant_result, normalize_round
from src.timing.parser import split_entry_line


logger = logging.getLogger(__name__)


UNRANKED = "-"


@dataclass(frozen=True)
class RankedResult:
    """A `ContestantResult` with its place in the standings."""

    result: ContestantResult
    rank: int | str
    position: int

    @property
    def is_ranked(self) -> bool:
        return self.rank != UNRANKED

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def round(self) -> int:
        return self.result.round

    @property
    def final_value(self) -> float | None:
        return self.result.final_value

    @property
    def final_display(self) -> str:
        return self.result.final_display

    @property
    def secondary_display(self) -> str | None:
        return self.result.secondary_display


def compare_results(a: ContestantResult, b: ContestantResult) -> int:
    """Three-way comparison on final value; missing values compare greatest."""

    if a.final_value is None and b.final_value is None:
        return 0
    if a.final_value is None:
        return 1
    if b.final_value is None:
        return -1
    if a.final_value < b.final_value:
        return -1
    if a.final_value > b.final_value:
        return 1
    return 0


def rank_results(
    results: Iterable[ContestantResult],
    *,
    round_no: int | None = None,
) -> list[RankedResult]:
    """Rank `results`, optionally only those from round `round_no`.

    Ties keep their input order.
    """

    pool = list(results)
    if round_no is not None:
        wanted = normalize_round(round_no)
        pool = [r for r in pool if r.round == wanted]
    if not pool:
        return []

    keys = np.array(
        [np.inf if r.final_value is None else r.final_value for r in pool],
        dtype=np.float64,
    )
    order = np.argsort(keys, kind="stable")

    ranked: list[RankedResult] = []
    current_rank = 0
    previous: float | None = None
    for idx, pool_idx in enumerate(order):
        result = pool[int(pool_idx)]
        value = result.final_value
        if idx == 0 or previous is None or value != previous:
            current_rank = idx + 1
        previous = value
        ranked.append(
            RankedResult(
                result=result,
                rank=current_rank if value is not None else UNRANKED,
                position=idx + 1,
            )
        )
    return ranked


def rank_category(
    entries: Iterable[ContestantResult | Mapping[str, Any]],
    policy: CategoryPolicy,
    *,
    round_no: int | None = None,
    strict: bool = False,
) -> list[RankedResult]:
    """Score raw contestant entries under `policy` and rank them.

    Raw entries are mappings with ``name``, ``times`` (a list, or one
    whitespace separated line) and an optional ``round``. An unusable
    ``round`` is logged and counted as round 1. Already scored
    `ContestantResult` objects pass through.
    """

    results = [_as_result(entry, policy, strict=strict) for entry in entries]
    return rank_results(results, round_no=round_no)


def _as_result(
    entry: ContestantResult | Mapping[str, Any],
    policy: CategoryPolicy,
    *,
    strict: bool,
) -> ContestantResult:
    if isinstance(entry, ContestantResult):
        return entry
    times: Sequence[Any] = entry.get("times") or []
    if isinstance(times, str):
        times = split_entry_line(times)
    name = str(entry.get("name", "")).strip()
    round_no = entry.get("round")
    try:
        round_no = normalize_round(round_no)
    except ValueError:
        logger.warning("%s: invalid round %r, counting the entry as round 1.", name, round_no)
        round_no = 1
    return build_contestant_result(
        name,
        times,
        policy,
        round_no=round_no,
        strict=strict,
    )


def split_ranked(ranked: Sequence[RankedResult]) -> tuple[list[RankedResult], list[RankedResult]]:
    """Separate ranked entries from those without a result."""

    placed = [r for r in ranked if r.is_ranked]
    unplaced = [r for r in ranked if not r.is_ranked]
    return placed, unplaced
