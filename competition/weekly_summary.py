"""Organizer tool to produce a plain-text summary of one contest week."""

from __future__ import annotations

import argparse
import logging

from competition.rank_contest import (
    CategoryStandings,
    _read_input,
    build_standings,
    load_registry,
    parse_contest,
)
from src.policies.registry import PolicyRegistry
from src.scoring.ranking import split_ranked


RULE = "=" * 40
THIN_RULE = "-" * 40
FULL_LISTING_LIMIT = 5
PODIUM_SIZE = 3


def _category_lines(block: CategoryStandings) -> list[str]:
    placed, unplaced = split_ranked(block.ranked)
    lines = [f"[{block.category}]", f"  Participants: {len(block.ranked)}"]

    # Short fields are listed in full, longer ones only down to the podium.
    shown = placed if len(placed) <= FULL_LISTING_LIMIT else placed[:PODIUM_SIZE]
    for entry in shown:
        line = f"    {entry.rank}. {entry.name} - {entry.final_display}"
        if entry.secondary_display and entry.secondary_display != "-":
            line += f" (mean: {entry.secondary_display})"
        lines.append(line)
    if len(placed) > len(shown):
        lines.append(f"    ... and {len(placed) - len(shown)} more")

    if unplaced:
        lines.append(f"  DNF: {len(unplaced)}")
    if not placed:
        lines.append("  No valid results")
    return lines


def build_weekly_summary(payload: dict, registry: PolicyRegistry) -> str:
    """Summarize every category of a contest week that has entries."""

    standings = [block for block in build_standings(payload, registry) if block.ranked]

    lines = [RULE]
    lines.append(f"  {payload.get('week') or 'Contest'} results")
    if payload.get("date"):
        lines.append(f"  Date: {payload['date']}")
    lines.append(RULE)
    lines.append("")

    participants: set[str] = set()
    for block in standings:
        participants.update(entry.name for entry in block.ranked)
        lines.extend(_category_lines(block))
        lines.append("")

    lines.append(THIN_RULE)
    lines.append(f"Total: {len(standings)} categories, {len(participants)} participants")
    lines.append(RULE)
    return "\n".join(lines) + "\n"


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a plain-text summary of a contest week.")
    parser.add_argument("--contest-path", type=str, default=None, help="Contest JSON (default: stdin).")
    parser.add_argument("--policies-path", type=str, default=None)
    parser.add_argument("--log-level", type=str, default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    registry = load_registry(args.policies_path)
    payload = parse_contest(_read_input(args.contest_path))
    print(build_weekly_summary(payload, registry), end="")


if __name__ == "__main__":
    main()
