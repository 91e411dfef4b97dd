"""Scoring modules"""

from .strike_policy import (
    StrikePolicy,
    StrikeDecision,
    THREE_STRIKE_POLICY,
    ZERO_TOLERANCE_POLICY,
    get_policy,
)
from .result_scorer import (
    calculate_score,
    build_question_results,
    summarize_violations,
    score_submission,
)

__all__ = [
    "StrikePolicy",
    "StrikeDecision",
    "THREE_STRIKE_POLICY",
    "ZERO_TOLERANCE_POLICY",
    "get_policy",
    "calculate_score",
    "build_question_results",
    "summarize_violations",
    "score_submission",
]
