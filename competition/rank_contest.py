"""Organizer tool to score and rank one week's contest sheet.

The contest sheet is JSON:

    {"week": "Week 14", "date": "2025-04-05",
     "contests": [{"project": "3x3",
                   "results": [{"name": "Lin", "round": 1,
                                "times": ["9.50", "10.00", "DNF", "9.00", "11.00"]}]}]}
"""

from __future__ import annotations

import argparse
import csv
from dataclasses import dataclass
import io
import json
import logging
import sys
from pathlib import Path
from typing import Any

from src.policies.registry import CategoryPolicy, PolicyRegistry, ScoringMethod, default_registry
from src.scoring.ranking import RankedResult, rank_category


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryStandings:
    """Ranked results for one category of a contest week."""

    category: str
    policy: CategoryPolicy
    ranked: list[RankedResult]


def _read_input(contest_path: str | None) -> str:
    if contest_path is None:
        return sys.stdin.read()
    path = Path(contest_path)
    if not path.exists():
        raise FileNotFoundError(f"Missing contest file: {path}")
    return path.read_text(encoding="utf-8")


def parse_contest(text: str) -> dict[str, Any]:
    """Decode a contest sheet and check its overall shape."""

    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("Contest sheet must be a JSON object.")
    contests = payload.get("contests")
    if not isinstance(contests, list):
        raise ValueError("Contest sheet must contain a 'contests' list.")
    for contest in contests:
        if not isinstance(contest, dict) or not (contest.get("project") or contest.get("category")):
            raise ValueError("Every contest needs a 'project' (category) name.")
    return payload


def category_name(contest: dict[str, Any]) -> str:
    return str(contest.get("project") or contest.get("category"))


def build_standings(
    payload: dict[str, Any],
    registry: PolicyRegistry,
    *,
    category: str | None = None,
    round_no: int | None = None,
    strict: bool = False,
) -> list[CategoryStandings]:
    """Rank every category in the sheet (or only `category`)."""

    wanted = registry.canonical_name(category) if category else None
    standings: list[CategoryStandings] = []
    for contest in payload["contests"]:
        name = category_name(contest)
        if wanted is not None and registry.canonical_name(name) != wanted:
            continue
        if not registry.is_known(name):
            logger.info("Category %r is not configured; scoring with the default policy.", name)
        policy = registry.get(name)
        ranked = rank_category(contest.get("results") or [], policy, round_no=round_no, strict=strict)
        for entry in ranked:
            for issue in entry.result.issues:
                logger.warning(
                    "%s / %s: dropped attempt %d (%r): %s",
                    name,
                    entry.name,
                    issue.index,
                    issue.raw_text,
                    issue.reason,
                )
        standings.append(CategoryStandings(category=name, policy=policy, ranked=ranked))
    return standings


def _headers(policy: CategoryPolicy) -> list[str]:
    headers = ["rank", "name", "round"]
    headers.extend(f"attempt_{i}" for i in range(1, policy.attempts + 1))
    headers.append("result")
    if policy.scoring_method is ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N:
        headers.append("mean")
    return headers


def _row(entry: RankedResult, policy: CategoryPolicy) -> list[str]:
    attempts = entry.result.attempt_displays()
    cells = [str(entry.rank), entry.name, str(entry.round)]
    cells.extend(attempts[i] if i < len(attempts) else "" for i in range(policy.attempts))
    cells.append(entry.final_display)
    if policy.scoring_method is ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N:
        cells.append(entry.secondary_display or "-")
    return cells


def _format_rows(standings: CategoryStandings) -> tuple[list[str], list[list[str]], list[int]]:
    headers = _headers(standings.policy)
    rows = [_row(entry, standings.policy) for entry in standings.ranked]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    return headers, rows, widths


def render_table(standings: CategoryStandings) -> str:
    lines = [f"{standings.category} ({standings.policy.describe()})"]
    if not standings.ranked:
        lines.append("  No results.")
        return "\n".join(lines)

    headers, rows, widths = _format_rows(standings)

    def fmt_row(cells: list[str]) -> str:
        return " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines.append(fmt_row(headers))
    lines.append("-+-".join("-" * w for w in widths))
    lines.extend(fmt_row(row) for row in rows)
    return "\n".join(lines)


def render_csv(standings: list[CategoryStandings]) -> str:
    """One CSV block per category, separated by a blank line."""

    out = io.StringIO()
    for idx, block in enumerate(standings):
        if idx:
            out.write("\n")
        writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
        out.write(f"# {block.category}\n")
        headers, rows, _ = _format_rows(block)
        writer.writerow(headers)
        writer.writerows(rows)
    return out.getvalue()


def load_registry(policies_path: str | None) -> PolicyRegistry:
    if policies_path is None:
        return default_registry()
    return PolicyRegistry.from_json(policies_path)


def main() -> None:
    parser = argparse.ArgumentParser(description="Score and rank a weekly contest sheet.")
    parser.add_argument("--contest-path", type=str, default=None, help="Contest JSON (default: stdin).")
    parser.add_argument("--category", type=str, default=None, help="Only rank this category.")
    parser.add_argument("--round", dest="round_no", type=int, default=None, help="Only rank this round.")
    parser.add_argument("--format", choices=("table", "csv"), default="table")
    parser.add_argument("--policies-path", type=str, default=None)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first malformed attempt instead of dropping it.",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.round_no is not None and args.round_no < 1:
        raise ValueError("--round must be positive.")

    registry = load_registry(args.policies_path)
    payload = parse_contest(_read_input(args.contest_path))
    standings = build_standings(
        payload,
        registry,
        category=args.category,
        round_no=args.round_no,
        strict=args.strict,
    )

    if args.format == "csv":
        sys.stdout.write(render_csv(standings))
        return

    title = " ".join(str(payload.get(key)) for key in ("week", "date") if payload.get(key))
    if title:
        print(title)
        print()
    if not standings:
        print("No matching categories.")
        return
    for block in standings:
        print(render_table(block))
        print()


if __name__ == "__main__":
    main()
