"""
Result Scorer - Scores a finished quiz and applies the security disposition
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..models import QuizDisposition, Violation

logger = logging.getLogger(__name__)


def calculate_score(questions: Sequence[Dict[str, Any]], answers: Sequence[Optional[str]]) -> float:
    """
    Percentage of questions answered correctly.

    Unanswered questions count as wrong. An empty quiz scores 0.
    """
    if not questions:
        return 0.0

    correct = 0
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        if answer is not None and answer == question.get("correct_answer"):
            correct += 1

    return (correct / len(questions)) * 100


def build_question_results(
    questions: Sequence[Dict[str, Any]],
    answers: Sequence[Optional[str]]
) -> List[Dict[str, Any]]:
    """Per-question breakdown stored with the assessment"""
    results = []
    for index, question in enumerate(questions):
        user_answer = answers[index] if index < len(answers) else None
        results.append({
            "question": question.get("question"),
            "answer": question.get("correct_answer"),
            "user_answer": user_answer,
            "is_correct": user_answer is not None and user_answer == question.get("correct_answer"),
            "explanation": question.get("explanation")
        })
    return results


def summarize_violations(violations: Sequence[Violation]) -> Dict[str, Any]:
    """
    Violation statistics for a session.

    Returns:
        Dict with total count, counts by kind and the ordered timeline
    """
    stats = {
        "total_violations": len(violations),
        "by_kind": {},
        "timeline": []
    }

    for violation in violations:
        kind = violation.kind.value
        stats["by_kind"][kind] = stats["by_kind"].get(kind, 0) + 1
        stats["timeline"].append({
            "timestamp": violation.timestamp.isoformat(),
            "kind": kind,
            "message": violation.message
        })

    return stats


def score_submission(
    questions: Sequence[Dict[str, Any]],
    answers: Sequence[Optional[str]],
    disposition: QuizDisposition,
    score: Optional[float] = None
) -> Dict[str, Any]:
    """
    Build the assessment payload for a finished attempt.

    Args:
        questions: Quiz questions with `question`, `correct_answer`, `explanation`
        answers: User answers by question index (None = unanswered)
        disposition: Security outcome from the monitor
        score: Client-computed score; recomputed when not provided

    Returns:
        Assessment dict; `quiz_score` is 0 for a disqualified attempt
    """
    raw_score = calculate_score(questions, answers) if score is None else float(score)
    final_score = disposition.apply(raw_score)

    question_results = build_question_results(questions, answers)
    wrong_answers = [q for q in question_results if not q["is_correct"]]

    if disposition.is_disqualified:
        logger.info(
            f"Disqualified attempt scored as {final_score} "
            f"(raw {raw_score:.1f}): {disposition.disqualification_reason}"
        )

    return {
        "quiz_score": final_score,
        "raw_score": raw_score,
        "category": "Technical",
        "questions": question_results,
        "wrong_answer_count": len(wrong_answers),
        "security": {
            "is_disqualified": disposition.is_disqualified,
            "disqualification_reason": disposition.disqualification_reason,
            "warning_count": disposition.warning_count,
            "tab_switch_count": disposition.tab_switch_count,
            "violations": summarize_violations(disposition.violations)
        }
    }
