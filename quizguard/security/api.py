"""
Quiz Security API - FastAPI endpoints for the quiz result collaborator

Endpoints:
- GET /api/quiz-security/policy - Active strike policy and blocked shortcuts
- POST /api/quiz-security/results - Submit a finished (or disqualified) quiz
- GET /api/quiz-security/results/{result_id} - Get a stored assessment
- GET /api/quiz-security/results/{result_id}/violations - Violation statistics

The anti-cheating monitor runs on the client; the disposition it
produces is trusted as submitted.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, model_validator

from ..config import settings
from .models import QuizDisposition, Violation, ViolationKind
from .scoring import get_policy, score_submission
from .shortcuts import BLOCKED_SHORTCUTS, describe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz-security", tags=["Quiz Security"])

# In-memory assessment storage (persistence lives with the hosting app)
_results: Dict[str, Dict[str, Any]] = {}


# ============== Request/Response Models ==============

class PolicyResponse(BaseModel):
    """Rules shown to the candidate before a secure quiz starts"""
    policy: str
    max_strikes: int
    default_quiz_minutes: int
    blocked_shortcuts: List[str]


class QuestionIn(BaseModel):
    """A quiz question as generated for the candidate"""
    question: str
    correct_answer: str
    options: List[str] = Field(default_factory=list)
    explanation: Optional[str] = None


class ViolationIn(BaseModel):
    """A violation recorded by the client-side monitor"""
    kind: ViolationKind
    message: str
    timestamp: datetime


class SecuritySummaryIn(BaseModel):
    """Final disposition produced by the monitor"""
    is_disqualified: bool = False
    disqualification_reason: Optional[str] = None
    violations: List[ViolationIn] = Field(default_factory=list)
    warning_count: int = Field(0, ge=0)

    @model_validator(mode="after")
    def check_reason(self):
        if self.is_disqualified and not self.disqualification_reason:
            raise ValueError("disqualification_reason is required when is_disqualified is true")
        if not self.is_disqualified and self.disqualification_reason:
            raise ValueError("disqualification_reason is only allowed for a disqualified attempt")
        return self


class SubmitResultRequest(BaseModel):
    """Request to store a finished quiz"""
    questions: List[QuestionIn] = Field(..., min_length=1)
    answers: List[Optional[str]]
    score: Optional[float] = Field(None, ge=0, le=100, description="Client score, recomputed if omitted")
    security: SecuritySummaryIn = Field(default_factory=SecuritySummaryIn)

    @model_validator(mode="after")
    def check_answers(self):
        if len(self.answers) > len(self.questions):
            raise ValueError("more answers than questions")
        return self


class QuestionResult(BaseModel):
    question: str
    answer: str
    user_answer: Optional[str]
    is_correct: bool
    explanation: Optional[str]


class AssessmentResponse(BaseModel):
    """Stored assessment"""
    id: str
    quiz_score: float
    raw_score: float
    category: str
    questions: List[QuestionResult]
    wrong_answer_count: int
    security: Dict[str, Any]
    created_at: datetime


class ViolationStatsResponse(BaseModel):
    """Violation statistics for a stored assessment"""
    total_violations: int
    by_kind: Dict[str, int]
    timeline: List[Dict[str, Any]]


# ============== API Endpoints ==============

@router.get("/policy", response_model=PolicyResponse)
async def get_active_policy():
    """
    Describe the strike policy the client monitor enforces.
    """
    policy = get_policy(settings.STRIKE_POLICY)
    return PolicyResponse(
        policy=policy.name,
        max_strikes=policy.max_strikes,
        default_quiz_minutes=settings.DEFAULT_QUIZ_MINUTES,
        blocked_shortcuts=[describe(combo) for combo in BLOCKED_SHORTCUTS]
    )


@router.post("/results", response_model=AssessmentResponse)
async def submit_result(request: SubmitResultRequest):
    """
    Score and store a finished quiz.

    A disqualified attempt is always stored with a score of zero,
    whatever score the client sent.
    """
    try:
        disposition = QuizDisposition(
            is_disqualified=request.security.is_disqualified,
            disqualification_reason=request.security.disqualification_reason,
            violations=[
                Violation(kind=v.kind, message=v.message, timestamp=v.timestamp)
                for v in request.security.violations
            ],
            warning_count=request.security.warning_count,
            tab_switch_count=request.security.warning_count
        )

        assessment = score_submission(
            questions=[q.model_dump() for q in request.questions],
            answers=request.answers,
            disposition=disposition,
            score=request.score
        )
    except Exception as e:
        logger.error(f"Failed to score quiz result: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    result_id = f"QR_{uuid.uuid4().hex[:8].upper()}"
    assessment["id"] = result_id
    assessment["created_at"] = datetime.now(timezone.utc)
    _results[result_id] = assessment

    logger.info(
        f"Stored quiz result {result_id}: score={assessment['quiz_score']}, "
        f"disqualified={disposition.is_disqualified}"
    )

    return AssessmentResponse(**assessment)


@router.get("/results/{result_id}", response_model=AssessmentResponse)
async def get_result(result_id: str):
    """
    Get a stored assessment.
    """
    assessment = _results.get(result_id)

    if not assessment:
        raise HTTPException(status_code=404, detail="Quiz result not found")

    return AssessmentResponse(**assessment)


@router.get("/results/{result_id}/violations", response_model=ViolationStatsResponse)
async def get_result_violations(result_id: str):
    """
    Get violation statistics for a stored assessment.
    """
    assessment = _results.get(result_id)

    if not assessment:
        raise HTTPException(status_code=404, detail="Quiz result not found")

    return ViolationStatsResponse(**assessment["security"]["violations"])
