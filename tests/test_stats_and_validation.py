"""Tests for category statistics, progress comparison and submission checks."""

from __future__ import annotations

import pytest

from src.policies.registry import CategoryPolicy, ScoringMethod, get_policy
from src.scoring.calculator import build_contestant_result
from src.scoring.stats import category_stats, compare_progress, score_summary
from src.scoring.validation import validate_submission


AO5 = get_policy("3x3")
FMC = get_policy("Fewest Moves")


@pytest.fixture()
def week_results():
    return [
        build_contestant_result("Lin", ["10.00", "9.00", "11.00", "DNF", "9.50"], AO5),
        build_contestant_result("Ana", ["9.00", "9.20", "9.40", "9.60", "9.80"], AO5),
        build_contestant_result("Kai", ["DNF", "DNF", "9.00", "9.10", "9.20"], AO5),
        build_contestant_result("Bo", ["12.00", "12.00", "12.00", "12.00", "12.00"], AO5),
    ]


def test_category_stats_over_valid_results(week_results) -> None:
    stats = category_stats(week_results, AO5)
    assert stats.total_participants == 4
    assert stats.valid_results == 3
    assert stats.best is not None and stats.best.contestant == "Ana"
    assert stats.best.display == "9.40"
    assert stats.worst is not None and stats.worst.contestant == "Bo"
    assert stats.worst.value == pytest.approx(12.0)
    lin = (9.50 + 10.00 + 11.00) / 3
    assert stats.mean_value == pytest.approx((9.40 + lin + 12.00) / 3)
    assert stats.mean_display == "10.52"


def test_category_stats_without_valid_results() -> None:
    results = [build_contestant_result("Zoe", ["DNF"] * 5, AO5)]
    stats = category_stats(results, AO5)
    assert stats.total_participants == 1
    assert stats.valid_results == 0
    assert stats.best is None and stats.worst is None
    assert stats.mean_display == "-"


def test_compare_progress_signs() -> None:
    old = build_contestant_result("Lin", ["12.00", "12.00", "12.00", "12.00", "12.00"], AO5)
    new = build_contestant_result("Lin", ["11.50", "11.50", "11.50", "11.50", "11.50"], AO5)

    better = compare_progress(old, new)
    assert better.has_improvement
    assert better.improvement == pytest.approx(0.5)
    assert better.display == "-0.50"

    worse = compare_progress(new, old)
    assert not worse.has_improvement
    assert worse.display == "+0.50"

    dnf = build_contestant_result("Lin", ["DNF"] * 5, AO5)
    missing = compare_progress(old, dnf)
    assert missing.improvement is None
    assert missing.display == "-"


def test_compare_progress_in_moves() -> None:
    old = build_contestant_result("Kai", ["30", "32", "31"], FMC)
    new = build_contestant_result("Kai", ["28", "29", "30"], FMC)
    assert compare_progress(old, new, FMC).display == "-2"


def test_score_summary_lines(week_results) -> None:
    assert score_summary(week_results[1], AO5) == "Ana - 9.40 (average of 5)"
    assert score_summary(week_results[2], AO5) == "Kai - DNF"
    mo3 = get_policy("7x7")
    big = build_contestant_result("Tom", ["4:15.67", "4:35.12", "4:25.45"], mo3)
    assert score_summary(big, mo3) == "Tom - 4:25.41 (mean of 3)"


def test_valid_submission_passes() -> None:
    check = validate_submission("Lin", ["5.89", "6.12+", "5.45", "DNF", "6.01"], AO5)
    assert check.is_valid
    assert check.errors == ()


def test_submission_errors_are_collected() -> None:
    check = validate_submission("  ", ["5.89", "6.12", "bad", "6.01", "6.00", "7.00"], AO5)
    assert not check.is_valid
    assert any("name" in e for e in check.errors)
    assert any("At most 5 attempts" in e for e in check.errors)
    assert any(e.startswith("Attempt 3 is malformed") for e in check.errors)


def test_empty_submission_is_rejected() -> None:
    check = validate_submission("Lin", [], AO5)
    assert "At least one attempt is required." in check.errors


def test_trimmed_average_needs_enough_finishes() -> None:
    check = validate_submission("Lin", ["DNF", "DNF", "DNF", "5.00", "6.00"], AO5)
    assert any("at least 3 finished" in e for e in check.errors)


def test_mean_needs_one_finish() -> None:
    check = validate_submission("Tom", ["DNF", "DNF", "DNF"], get_policy("6x6"))
    assert any("at least one finished" in e for e in check.errors)


def test_category_entry_rules() -> None:
    fmc = validate_submission("Kai", ["28.5", "DNF", "30"], FMC)
    assert any("whole numbers" in e for e in fmc.errors)
    assert any("DNF is not accepted" in e for e in fmc.errors)

    blind = validate_submission("Mei", ["1:25.67+", "DNF", "1:35.12"], get_policy("3x3 Blindfolded"))
    assert any("Attempt 1: +2 penalties" in e for e in blind.errors)
    assert not any("DNF" in e for e in blind.errors)


def test_method_labels_come_from_the_policy() -> None:
    assert AO5.method_label == "average of 5"
    assert get_policy("6x6").method_label == "mean of 3"
    assert get_policy("3x3 Blindfolded").method_label == "best single"
    assert CategoryPolicy(attempts=3, scoring_method=ScoringMethod.BEST_SINGLE).describe() == (
        "3 attempts, ranked by best single"
    )
