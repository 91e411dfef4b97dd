"""
Quiz Security Logger - Logs quiz session lifecycle and violations
"""

import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def log_quiz_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a quiz security event.

    Args:
        session_id: Monitor session ID
        event_type: Type of event (start, violation, disqualified, end, etc.)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[QUIZ] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, duration_minutes: int, policy: str):
    """Log session start event"""
    log_quiz_event(
        session_id=session_id,
        event_type="session_start",
        details={
            "duration_minutes": duration_minutes,
            "policy": policy
        }
    )


def log_violation(session_id: str, kind: str, strike_count: int, message: str):
    """Log a recorded violation"""
    log_quiz_event(
        session_id=session_id,
        event_type="violation",
        details={
            "kind": kind,
            "strike": strike_count,
            "message": repr(message)
        },
        level="warning"
    )


def log_disqualified(session_id: str, reason: str, strike_count: int):
    """Log a disqualification"""
    log_quiz_event(
        session_id=session_id,
        event_type="disqualified",
        details={
            "reason": repr(reason),
            "strikes": strike_count
        },
        level="warning"
    )


def log_session_end(session_id: str, status: str, strike_count: int, remaining_seconds: int):
    """Log session end event"""
    log_quiz_event(
        session_id=session_id,
        event_type="session_end",
        details={
            "status": status,
            "strikes": strike_count,
            "remaining_seconds": remaining_seconds
        }
    )
