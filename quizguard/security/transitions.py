r"""
Quiz Session State Machine

Pure transition function: given the current session and one input,
compute the next session plus the notices and environment effects the
shell must carry out. No I/O happens here.

    INACTIVE --start--> ACTIVE --strike limit--> DISQUALIFIED
                          |  \--end / time up--> ENDED
                          \----start (re-arm)--> ACTIVE
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Tuple, Union

from .models import Notice, QuizSession, SessionStatus, Violation, ViolationKind
from .scoring.strike_policy import StrikePolicy


class Effect(str, Enum):
    """Side effects requested from the shell"""
    ATTACH_LISTENERS = "attach_listeners"
    DETACH_LISTENERS = "detach_listeners"
    REQUEST_FULLSCREEN = "request_fullscreen"
    EXIT_FULLSCREEN = "exit_fullscreen"
    REENTER_FULLSCREEN = "reenter_fullscreen"
    FINALIZE = "finalize"


# ============== Inputs ==============

@dataclass(frozen=True)
class StartQuiz:
    duration_minutes: int = 30


@dataclass(frozen=True)
class EndQuiz:
    pass


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class ViolationDetected:
    kind: ViolationKind
    message: str


@dataclass(frozen=True)
class FocusRestored:
    pass


QuizInput = Union[StartQuiz, EndQuiz, Tick, ViolationDetected, FocusRestored]


@dataclass(frozen=True)
class Transition:
    session: QuizSession
    notices: Tuple[Notice, ...] = ()
    effects: Tuple[Effect, ...] = ()


TIME_UP_MESSAGE = "Time is up! Submitting your quiz."
INVALID_DURATION_MESSAGE = "Invalid quiz duration, using {minutes} minutes"

_LEAVE_ACTIVE = (Effect.DETACH_LISTENERS, Effect.EXIT_FULLSCREEN)


def transition(
    session: QuizSession,
    event: QuizInput,
    policy: StrikePolicy,
    now: datetime,
    default_minutes: int = 30
) -> Transition:
    """
    Compute the next session state.

    Args:
        session: Current session (not modified)
        event: Input to apply
        policy: Strike policy deciding warnings and disqualification
        now: Current time, used as the violation timestamp
        default_minutes: Fallback for an invalid start duration

    Returns:
        Transition with the new session, notices and requested effects
    """
    if isinstance(event, StartQuiz):
        return _start(session, event, default_minutes)
    if isinstance(event, EndQuiz):
        return _end(session)
    if isinstance(event, Tick):
        return _tick(session)
    if isinstance(event, ViolationDetected):
        return _violation(session, event, policy, now)
    if isinstance(event, FocusRestored):
        return Transition(replace(session, focus_lost=False))
    raise TypeError(f"Unsupported quiz input: {event!r}")


def _start(session: QuizSession, event: StartQuiz, default_minutes: int) -> Transition:
    notices = []
    minutes = event.duration_minutes
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 1:
        notices.append(Notice("info", INVALID_DURATION_MESSAGE.format(minutes=default_minutes)))
        minutes = default_minutes

    effects = [] if session.is_active else [Effect.ATTACH_LISTENERS]
    effects.append(Effect.REQUEST_FULLSCREEN)

    new_session = QuizSession(
        status=SessionStatus.ACTIVE,
        remaining_seconds=minutes * 60
    )
    return Transition(new_session, tuple(notices), tuple(effects))


def _end(session: QuizSession) -> Transition:
    # Disqualified is terminal and keeps its reason; everything else ends
    if session.status == SessionStatus.ACTIVE:
        session = replace(session, status=SessionStatus.ENDED, focus_lost=False)
    return Transition(session, (), _LEAVE_ACTIVE)


def _tick(session: QuizSession) -> Transition:
    if not session.is_active:
        return Transition(session)

    remaining = max(session.remaining_seconds - 1, 0)
    if remaining > 0:
        return Transition(replace(session, remaining_seconds=remaining))

    expired = replace(session, remaining_seconds=0, status=SessionStatus.ENDED)
    return _finalize(expired, (Notice("info", TIME_UP_MESSAGE, 3000),))


def _violation(
    session: QuizSession,
    event: ViolationDetected,
    policy: StrikePolicy,
    now: datetime
) -> Transition:
    if not session.is_active:
        return Transition(session)

    # One departure (blur + visibilitychange) counts once
    if event.kind == ViolationKind.TAB_SWITCH:
        if session.focus_lost:
            return Transition(session)

    timestamp = now
    if session.violations and session.violations[-1].timestamp > now:
        timestamp = session.violations[-1].timestamp

    violation = Violation(kind=event.kind, message=event.message, timestamp=timestamp)
    strike_count = session.strike_count + 1
    session = replace(
        session,
        violations=session.violations + (violation,),
        strike_count=strike_count,
        focus_lost=session.focus_lost or event.kind == ViolationKind.TAB_SWITCH
    )

    decision = policy.evaluate(strike_count)
    notice = Notice(decision.level, decision.message, decision.duration_ms)

    if decision.disqualify:
        session = replace(
            session,
            status=SessionStatus.DISQUALIFIED,
            disqualification_reason=policy.reason
        )
        return _finalize(session, (notice,))

    effects = ()
    if event.kind == ViolationKind.FULLSCREEN_EXIT:
        effects = (Effect.REENTER_FULLSCREEN,)
    return Transition(session, (notice,), effects)


def _finalize(session: QuizSession, notices: Tuple[Notice, ...]) -> Transition:
    """Leave ACTIVE and request auto-submit unless already latched."""
    effects = _LEAVE_ACTIVE
    if not session.finalized:
        effects = effects + (Effect.FINALIZE,)
        session = replace(session, finalized=True)
    return Transition(session, notices, effects)
