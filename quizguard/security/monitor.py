"""
Quiz Security Monitor - Anti-cheating shell around the quiz state machine
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..config import settings
from .events import BrowserEvent, Channel, EventSource, Handler
from .models import (
    Notice,
    QuizDisposition,
    QuizSession,
    SessionStatus,
    Violation,
    ViolationKind,
)
from .presentation import FullscreenError, NullPresentation, PresentationMode
from .scoring.strike_policy import StrikePolicy, get_policy
from .shortcuts import describe, match_blocked_shortcut
from .transitions import (
    Effect,
    EndQuiz,
    FocusRestored,
    QuizInput,
    StartQuiz,
    Tick,
    ViolationDetected,
    transition,
)
from .utils.logging import (
    log_disqualified,
    log_session_end,
    log_session_start,
    log_violation,
)

logger = logging.getLogger(__name__)

FULLSCREEN_ADVISORY = "Please allow fullscreen for the best experience"


def format_time(seconds: int) -> str:
    """Format a countdown as M:SS (no leading zero on minutes)."""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


class QuizSecurityMonitor:
    """
    Detects and penalizes suspected cheating during a timed quiz.

    Browser signals arrive through an injected EventSource; every state
    change goes through the pure `transition` function and this class
    only carries out the resulting effects (listener wiring, fullscreen
    requests, notices, auto-submit).

    Public operations never raise. Environment failures become
    advisory notices.
    """

    def __init__(
        self,
        events: EventSource,
        presentation: Optional[PresentationMode] = None,
        ticker: Optional[EventSource] = None,
        on_finalize: Optional[Callable[[QuizDisposition], None]] = None,
        notify: Optional[Callable[[Notice], None]] = None,
        policy: Optional[StrikePolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
        default_minutes: Optional[int] = None,
        session_id: Optional[str] = None
    ):
        """
        Args:
            events: Source for visibility, context menu, keydown and
                fullscreen change channels
            presentation: Fullscreen adapter (headless if not provided)
            ticker: Source for the one-second timer channel
                (defaults to `events`)
            on_finalize: Finish callback invoked once per auto-submit
            notify: Receives advisory notices for the UI
            policy: Strike policy (configured policy if not provided)
            clock: Returns the current time for violation timestamps
            default_minutes: Quiz length used when none/invalid is given
            session_id: Optional custom ID for log correlation
        """
        self.id = session_id or f"QZ_{uuid.uuid4().hex[:6].upper()}"
        self.events = events
        self.ticker = ticker or events
        self.presentation = presentation or NullPresentation()
        self.policy = policy or get_policy(settings.STRIKE_POLICY)
        self.default_minutes = default_minutes or settings.DEFAULT_QUIZ_MINUTES

        self._on_finalize = on_finalize
        self._notify = notify
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._session = QuizSession.initial()
        self._attached = False
        self.notices: List[Notice] = []

        self._handlers: Dict[Channel, Handler] = {
            Channel.VISIBILITY: self._on_visibility,
            Channel.CONTEXT_MENU: self._on_context_menu,
            Channel.KEYDOWN: self._on_keydown,
            Channel.FULLSCREEN_CHANGE: self._on_fullscreen_change,
            Channel.TIMER_TICK: self._on_tick,
        }

    # ============== Control surface ==============

    def start_quiz(self, duration_minutes: Optional[int] = None):
        """Arm (or re-arm) the monitor for a fresh attempt."""
        if duration_minutes is None:
            duration_minutes = self.default_minutes
        self._apply(StartQuiz(duration_minutes))

    def end_quiz(self):
        """Stop monitoring. Idempotent and safe from the finish callback."""
        self._apply(EndQuiz())

    def close(self):
        """Teardown for the hosting UI: release listeners and fullscreen."""
        self.end_quiz()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    format_time = staticmethod(format_time)

    # ============== Observable state ==============

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def is_quiz_active(self) -> bool:
        return self._session.is_active

    @property
    def remaining_seconds(self) -> int:
        return self._session.remaining_seconds

    @property
    def violations(self) -> List[Violation]:
        return list(self._session.violations)

    @property
    def strike_count(self) -> int:
        return self._session.strike_count

    @property
    def warning_count(self) -> int:
        return self._session.strike_count

    @property
    def tab_switch_count(self) -> int:
        return self._session.strike_count

    @property
    def is_disqualified(self) -> bool:
        return self._session.is_disqualified

    @property
    def disqualification_reason(self) -> Optional[str]:
        return self._session.disqualification_reason

    def disposition(self) -> QuizDisposition:
        return QuizDisposition.from_session(self._session)

    # ============== Channel handlers ==============

    def _on_visibility(self, event: BrowserEvent):
        if not self.is_quiz_active:
            return
        if event.hidden:
            self._apply(ViolationDetected(
                ViolationKind.TAB_SWITCH,
                "User switched tabs or minimized window"
            ))
        else:
            self._apply(FocusRestored())

    def _on_context_menu(self, event: BrowserEvent):
        if not self.is_quiz_active:
            return
        event.prevent_default()
        self._apply(ViolationDetected(
            ViolationKind.CONTEXT_MENU,
            "Attempted to open the context menu"
        ))

    def _on_keydown(self, event: BrowserEvent):
        if not self.is_quiz_active:
            return
        combo = match_blocked_shortcut(event)
        if combo is None:
            return
        event.prevent_default()
        self._apply(ViolationDetected(
            ViolationKind.BLOCKED_SHORTCUT,
            f"Attempted to use blocked keyboard shortcut ({describe(combo)})"
        ))

    def _on_fullscreen_change(self, event: BrowserEvent):
        if self.is_quiz_active and not event.fullscreen:
            self._apply(ViolationDetected(
                ViolationKind.FULLSCREEN_EXIT,
                "Exited fullscreen mode"
            ))

    def _on_tick(self, event: BrowserEvent):
        self._apply(Tick())

    # ============== Shell ==============

    def _apply(self, event: QuizInput):
        previous = self._session
        result = transition(previous, event, self.policy, self._clock(), self.default_minutes)
        self._session = result.session

        self._log_change(event, previous, result.session)

        for notice in result.notices:
            self._emit(notice)
        for effect in result.effects:
            self._run_effect(effect)

    def _log_change(self, event: QuizInput, previous: QuizSession, current: QuizSession):
        if isinstance(event, StartQuiz):
            log_session_start(self.id, current.remaining_seconds // 60, self.policy.name)

        if current.strike_count > previous.strike_count:
            latest = current.violations[-1]
            log_violation(self.id, latest.kind.value, current.strike_count, latest.message)

        if current.is_disqualified and not previous.is_disqualified:
            log_disqualified(self.id, current.disqualification_reason, current.strike_count)

        if previous.is_active and not current.is_active:
            log_session_end(
                self.id,
                current.status.value,
                current.strike_count,
                current.remaining_seconds
            )

    def _emit(self, notice: Notice):
        self.notices.append(notice)
        if self._notify is None:
            log = logger.warning if notice.level in ("warning", "error") else logger.info
            log(f"[{self.id}] {notice.message}")
            return
        try:
            self._notify(notice)
        except Exception as e:
            logger.warning(f"Notice delivery failed for session {self.id}: {e}")

    def _run_effect(self, effect: Effect):
        if effect == Effect.ATTACH_LISTENERS:
            self._attach()
        elif effect == Effect.DETACH_LISTENERS:
            self._detach()
        elif effect == Effect.REQUEST_FULLSCREEN:
            self._request_fullscreen()
        elif effect == Effect.REENTER_FULLSCREEN:
            self._reenter_fullscreen()
        elif effect == Effect.EXIT_FULLSCREEN:
            self._exit_fullscreen()
        elif effect == Effect.FINALIZE:
            self._finalize()

    def _attach(self):
        if self._attached:
            return
        for channel, handler in self._handlers.items():
            source = self.ticker if channel == Channel.TIMER_TICK else self.events
            source.subscribe(channel, handler)
        self._attached = True
        logger.debug(f"Listeners attached for session {self.id}")

    def _detach(self):
        if not self._attached:
            return
        self._attached = False
        for channel, handler in self._handlers.items():
            source = self.ticker if channel == Channel.TIMER_TICK else self.events
            try:
                source.unsubscribe(channel, handler)
            except Exception as e:
                logger.warning(f"Failed to unsubscribe {channel.value} for session {self.id}: {e}")
        logger.debug(f"Listeners detached for session {self.id}")

    def _request_fullscreen(self):
        try:
            self.presentation.request_fullscreen()
        except FullscreenError as e:
            logger.info(f"Fullscreen request denied for session {self.id}: {e}")
            self._emit(Notice("info", FULLSCREEN_ADVISORY, 3000))
        except Exception as e:
            logger.warning(f"Fullscreen request failed for session {self.id}: {e}")
            self._emit(Notice("info", FULLSCREEN_ADVISORY, 3000))

    def _reenter_fullscreen(self):
        try:
            self.presentation.request_fullscreen()
        except Exception as e:
            logger.debug(f"Could not re-enter fullscreen for session {self.id}: {e}")

    def _exit_fullscreen(self):
        try:
            if self.presentation.is_fullscreen:
                self.presentation.exit_fullscreen()
        except Exception as e:
            logger.warning(f"Exit fullscreen failed for session {self.id}: {e}")

    def _finalize(self):
        disposition = self.disposition()
        logger.info(
            f"Session {self.id} auto-submitted: status={self.status.value}, "
            f"strikes={self.strike_count}"
        )
        if self._on_finalize is None:
            return
        try:
            self._on_finalize(disposition)
        except Exception as e:
            logger.error(f"Finish callback failed for session {self.id}: {e}")

    def __repr__(self):
        return f"<QuizSecurityMonitor {self.id} status={self.status.value}>"
