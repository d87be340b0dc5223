"""Result calculation, ranking and reporting helpers."""

from src.scoring.calculator import (
    BestSingleRule,
    BestSingleWithMeanRule,
    ContestantResult,
    MeanOfNRule,
    ResultSummary,
    ScoringRule,
    TrimmedAverageRule,
    build_contestant_result,
    calculate,
    rule_for,
)
from src.scoring.ranking import (
    UNRANKED,
    RankedResult,
    compare_results,
    rank_category,
    rank_results,
    split_ranked,
)
from src.scoring.stats import CategoryStats, Progress, category_stats, compare_progress, score_summary
from src.scoring.validation import SubmissionCheck, validate_submission

__all__ = [
    "ScoringRule",
    "BestSingleRule",
    "MeanOfNRule",
    "TrimmedAverageRule",
    "BestSingleWithMeanRule",
    "ResultSummary",
    "ContestantResult",
    "build_contestant_result",
    "calculate",
    "rule_for",
    "RankedResult",
    "UNRANKED",
    "compare_results",
    "rank_category",
    "rank_results",
    "split_ranked",
    "CategoryStats",
    "Progress",
    "category_stats",
    "compare_progress",
    "score_summary",
    "SubmissionCheck",
    "validate_submission",
]
