"""Tests for competition ranking: ties, missing results and round filters."""

from __future__ import annotations

from functools import cmp_to_key

import pytest

from src.policies.registry import ScoringMethod, get_policy
from src.scoring.calculator import ContestantResult
from src.scoring.ranking import (
    UNRANKED,
    compare_results,
    rank_category,
    rank_results,
    split_ranked,
)
from src.timing.formatter import format_value


def _result(name: str, value: float | None, round_no: int = 1) -> ContestantResult:
    return ContestantResult(
        name=name,
        attempts=(),
        final_value=value,
        final_display=format_value(value) if value is not None else "DNF",
        method=ScoringMethod.TRIMMED_AVERAGE_OF_N,
        round=round_no,
    )


def test_ties_share_rank_and_next_value_takes_its_position() -> None:
    ranked = rank_results(
        [_result("a", 9.5), _result("b", 9.5), _result("c", 10.0), _result("d", None)]
    )
    assert [r.rank for r in ranked] == [1, 1, 3, UNRANKED]
    assert [r.position for r in ranked] == [1, 2, 3, 4]


def test_three_way_tie_carries_first_rank() -> None:
    ranked = rank_results(
        [_result("a", 8.0), _result("b", 8.0), _result("c", 8.0), _result("d", 9.0)]
    )
    assert [r.rank for r in ranked] == [1, 1, 1, 4]


def test_sorting_is_ascending_with_missing_results_last() -> None:
    ranked = rank_results(
        [_result("slow", 12.0), _result("dnf", None), _result("fast", 7.25), _result("mid", 9.0)]
    )
    assert [r.name for r in ranked] == ["fast", "mid", "slow", "dnf"]
    assert [r.rank for r in ranked] == [1, 2, 3, UNRANKED]
    assert not ranked[-1].is_ranked


def test_equal_values_keep_input_order() -> None:
    ranked = rank_results(
        [_result("x", None), _result("first", 5.0), _result("y", None), _result("second", 5.0)]
    )
    assert [r.name for r in ranked] == ["first", "second", "x", "y"]
    assert [r.rank for r in ranked] == [1, 1, UNRANKED, UNRANKED]


def test_empty_input_gives_empty_ranking() -> None:
    assert rank_results([]) == []
    assert rank_results([_result("a", 1.0)], round_no=2) == []


def test_round_filter_ranks_only_that_round() -> None:
    pool = [_result("a", 9.0, 1), _result("b", 8.0, 2), _result("c", 10.0, 2)]
    ranked = rank_results(pool, round_no=2)
    assert [r.name for r in ranked] == ["b", "c"]
    assert [r.rank for r in ranked] == [1, 2]


def test_compare_results_orders_missing_values_last() -> None:
    items = [_result("n1", None), _result("b", 2.0), _result("a", 1.0), _result("n2", None)]
    ordered = sorted(items, key=cmp_to_key(compare_results))
    assert [r.name for r in ordered] == ["a", "b", "n1", "n2"]
    assert compare_results(_result("p", 3.0), _result("q", 3.0)) == 0
    assert compare_results(_result("p", None), _result("q", None)) == 0


def test_rank_category_scores_raw_entries() -> None:
    entries = [
        {"name": "Lin", "round": 1, "times": ["10.00", "9.00", "11.00", "DNF", "9.50"]},
        {"name": "Ana", "round": 1, "times": "9.00 9.20 9.40 9.60 9.80"},
        {"name": "Kai", "times": ["DNF", "DNF", "9.00", "9.10", "9.20"]},
        {"name": "Bo", "round": 2, "times": ["8.00", "8.00", "8.00", "8.00", "8.00"]},
    ]
    ranked = rank_category(entries, get_policy("3x3"), round_no=1)
    assert [r.name for r in ranked] == ["Ana", "Lin", "Kai"]
    assert [r.rank for r in ranked] == [1, 2, UNRANKED]
    assert ranked[0].final_display == "9.40"
    assert ranked[1].final_value == pytest.approx(10.1667, abs=1e-4)

    placed, unplaced = split_ranked(ranked)
    assert [r.name for r in placed] == ["Ana", "Lin"]
    assert [r.name for r in unplaced] == ["Kai"]


def test_rank_category_blindfolded_ranks_by_single() -> None:
    entries = [
        {"name": "Mei", "times": ["1:25.67", "DNF", "1:35.12"]},
        {"name": "Tom", "times": ["1:30.00", "1:31.00", "1:32.00"]},
        {"name": "Zoe", "times": ["DNF", "DNF", "DNF"]},
    ]
    ranked = rank_category(entries, get_policy("3x3 Blindfolded"))
    assert [r.name for r in ranked] == ["Mei", "Tom", "Zoe"]
    assert [r.rank for r in ranked] == [1, 2, UNRANKED]
    assert ranked[0].secondary_display == "DNF"
    assert ranked[1].secondary_display == "1:31.00"


@pytest.mark.parametrize("bad_round", ["final", -1, "0", "1st"])
def test_unusable_round_counts_as_round_one(bad_round: object, caplog: pytest.LogCaptureFixture) -> None:
    entries = [
        {"name": "Lin", "round": 1, "times": ["10.00", "9.00", "11.00", "DNF", "9.50"]},
        {"name": "Ana", "round": bad_round, "times": ["9.00", "9.20", "9.40", "9.60", "9.80"]},
    ]
    with caplog.at_level("WARNING", logger="src.scoring.ranking"):
        ranked = rank_category(entries, get_policy("3x3"), round_no=1)
    assert [r.name for r in ranked] == ["Ana", "Lin"]
    assert ranked[0].round == 1
    assert "invalid round" in caplog.text


def test_round_filter_argument_still_rejects_nonsense() -> None:
    with pytest.raises(ValueError):
        rank_results([_result("a", 1.0)], round_no=-2)
