"""
Quiz Security Models - Session state, violations and the final disposition
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class SessionStatus(str, Enum):
    """Lifecycle states of a quiz session"""
    INACTIVE = "inactive"
    ACTIVE = "active"
    DISQUALIFIED = "disqualified"
    ENDED = "ended"


class ViolationKind(str, Enum):
    """Kinds of suspicious actions detected during an active quiz"""
    TAB_SWITCH = "tab_switch"
    BLOCKED_SHORTCUT = "blocked_shortcut"
    CONTEXT_MENU = "context_menu"
    FULLSCREEN_EXIT = "fullscreen_exit"


@dataclass(frozen=True)
class Violation:
    """A single recorded strike"""
    kind: ViolationKind
    message: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass(frozen=True)
class QuizSession:
    """
    Ephemeral state of one quiz attempt.

    Instances are never mutated; transitions produce a new session.
    `strike_count` always equals `len(violations)`.
    """
    status: SessionStatus = SessionStatus.INACTIVE
    remaining_seconds: int = 0
    violations: Tuple[Violation, ...] = ()
    strike_count: int = 0
    disqualification_reason: Optional[str] = None

    # One-shot auto-submit latch, reset only by a fresh start
    finalized: bool = False

    # Set between a focus loss and the next focus/visible signal
    focus_lost: bool = False

    @classmethod
    def initial(cls) -> "QuizSession":
        return cls()

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def is_disqualified(self) -> bool:
        return self.status == SessionStatus.DISQUALIFIED


@dataclass(frozen=True)
class Notice:
    """Advisory message for the hosting UI (toast, banner)"""
    level: str  # "info", "warning", "error"
    message: str
    duration_ms: int = 3000


@dataclass
class QuizDisposition:
    """
    Final outcome handed to the result-submission collaborator.

    The collaborator must persist `apply(score)` rather than its own
    score so that a disqualified attempt is always recorded as zero.
    """
    is_disqualified: bool
    disqualification_reason: Optional[str]
    violations: List[Violation] = field(default_factory=list)
    warning_count: int = 0
    tab_switch_count: int = 0

    @property
    def score_override(self) -> Optional[float]:
        return 0.0 if self.is_disqualified else None

    def apply(self, score: float) -> float:
        """Return the score to persist for this attempt."""
        override = self.score_override
        return override if override is not None else score

    @classmethod
    def from_session(cls, session: QuizSession) -> "QuizDisposition":
        return cls(
            is_disqualified=session.is_disqualified,
            disqualification_reason=session.disqualification_reason,
            violations=list(session.violations),
            warning_count=session.strike_count,
            tab_switch_count=session.strike_count
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_disqualified": self.is_disqualified,
            "disqualification_reason": self.disqualification_reason,
            "violations": [v.to_dict() for v in self.violations],
            "warning_count": self.warning_count,
            "tab_switch_count": self.tab_switch_count,
            "score_override": self.score_override
        }
