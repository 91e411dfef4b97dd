"""
Tests for the Quiz Session State Machine

Covers the pure transition function: lifecycle, strike escalation,
timer expiry and the one-shot auto-submit latch.
"""
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from quizguard.security.models import QuizSession, SessionStatus, ViolationKind
from quizguard.security.scoring import THREE_STRIKE_POLICY, ZERO_TOLERANCE_POLICY
from quizguard.security.transitions import (
    Effect,
    EndQuiz,
    FocusRestored,
    StartQuiz,
    Tick,
    ViolationDetected,
    transition,
)

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def apply(session, event, policy=THREE_STRIKE_POLICY, now=NOW):
    return transition(session, event, policy, now)


def active_session(minutes=30):
    return apply(QuizSession.initial(), StartQuiz(minutes)).session


def violation(kind=ViolationKind.CONTEXT_MENU, message="Attempted to open the context menu"):
    return ViolationDetected(kind, message)


class TestStart:
    """Tests for arming a session"""

    def test_initial_session_is_inactive(self):
        session = QuizSession.initial()

        assert session.status == SessionStatus.INACTIVE
        assert session.remaining_seconds == 0
        assert session.violations == ()
        assert session.strike_count == 0
        assert session.disqualification_reason is None

    def test_start_sets_timer_and_requests_fullscreen(self):
        result = apply(QuizSession.initial(), StartQuiz(30))

        assert result.session.status == SessionStatus.ACTIVE
        assert result.session.remaining_seconds == 1800
        assert result.effects == (Effect.ATTACH_LISTENERS, Effect.REQUEST_FULLSCREEN)
        assert result.notices == ()

    def test_restart_clears_violations_and_reason(self):
        session = active_session()
        for _ in range(3):
            session = apply(session, violation()).session
        assert session.status == SessionStatus.DISQUALIFIED

        result = apply(session, StartQuiz(10))

        assert result.session.status == SessionStatus.ACTIVE
        assert result.session.remaining_seconds == 600
        assert result.session.violations == ()
        assert result.session.strike_count == 0
        assert result.session.disqualification_reason is None
        assert result.session.finalized is False

    def test_rearm_while_active_does_not_attach_twice(self):
        result = apply(active_session(), StartQuiz(5))

        assert Effect.ATTACH_LISTENERS not in result.effects
        assert Effect.REQUEST_FULLSCREEN in result.effects

    @pytest.mark.parametrize("minutes", [0, -5, 2.5, "30", True, None])
    def test_invalid_duration_falls_back_to_default(self, minutes):
        result = transition(
            QuizSession.initial(), StartQuiz(minutes), THREE_STRIKE_POLICY, NOW, default_minutes=20
        )

        assert result.session.remaining_seconds == 1200
        assert result.notices[0].level == "info"

    def test_start_does_not_mutate_input(self):
        session = QuizSession.initial()
        apply(session, StartQuiz(30))

        assert session.status == SessionStatus.INACTIVE


class TestStrikes:
    """Tests for violation bookkeeping under the three-strike policy"""

    def test_first_violation_warns(self):
        result = apply(active_session(), violation())

        assert result.session.status == SessionStatus.ACTIVE
        assert result.session.strike_count == 1
        assert len(result.session.violations) == 1
        assert result.notices[0].level == "warning"
        assert result.notices[0].message.startswith("1st Warning")
        assert Effect.FINALIZE not in result.effects

    def test_second_violation_is_final_warning(self):
        session = apply(active_session(), violation()).session
        result = apply(session, violation())

        assert result.session.status == SessionStatus.ACTIVE
        assert result.session.strike_count == 2
        assert result.notices[0].message.startswith("2nd Warning")
        assert result.notices[0].duration_ms == 4000

    def test_third_violation_disqualifies_and_finalizes(self):
        session = active_session()
        session = apply(session, violation()).session
        session = apply(session, violation(ViolationKind.TAB_SWITCH, "left")).session
        result = apply(session, violation(ViolationKind.FULLSCREEN_EXIT, "Exited fullscreen mode"))

        assert result.session.status == SessionStatus.DISQUALIFIED
        assert result.session.strike_count == 3
        assert result.session.disqualification_reason == "Three security violations (3 strikes rule)"
        assert result.notices[0].level == "error"
        assert result.effects.count(Effect.FINALIZE) == 1
        assert Effect.DETACH_LISTENERS in result.effects
        assert Effect.REENTER_FULLSCREEN not in result.effects

    def test_strike_count_tracks_violations(self):
        session = active_session()
        for n in range(1, 3):
            session = apply(session, violation()).session
            assert session.strike_count == n
            assert len(session.violations) == n

    def test_no_violations_after_disqualification(self):
        session = active_session()
        for _ in range(3):
            session = apply(session, violation()).session

        result = apply(session, violation())

        assert result.session == session
        assert result.effects == ()

    def test_violation_ignored_when_inactive(self):
        result = apply(QuizSession.initial(), violation())

        assert result.session.strike_count == 0
        assert result.notices == ()

    def test_fullscreen_exit_requests_reentry(self):
        result = apply(active_session(), violation(ViolationKind.FULLSCREEN_EXIT, "Exited fullscreen mode"))

        assert result.effects == (Effect.REENTER_FULLSCREEN,)

    def test_zero_tolerance_disqualifies_on_first_violation(self):
        session = active_session()
        result = apply(session, violation(), policy=ZERO_TOLERANCE_POLICY)

        assert result.session.status == SessionStatus.DISQUALIFIED
        assert result.session.disqualification_reason == ZERO_TOLERANCE_POLICY.reason
        assert Effect.FINALIZE in result.effects

    def test_timestamps_never_go_backwards(self):
        session = apply(active_session(), violation(), now=NOW).session
        result = apply(session, violation(), now=NOW - timedelta(seconds=30))

        first, second = result.session.violations
        assert second.timestamp >= first.timestamp


class TestTabSwitchCoalescing:
    """Blur and visibilitychange for the same departure count once"""

    def test_repeated_focus_loss_counts_once(self):
        tab_switch = violation(ViolationKind.TAB_SWITCH, "left")
        session = apply(active_session(), tab_switch).session
        session = apply(session, tab_switch).session

        assert session.strike_count == 1

    def test_focus_restored_rearms_tab_switch(self):
        tab_switch = violation(ViolationKind.TAB_SWITCH, "left")
        session = apply(active_session(), tab_switch).session
        session = apply(session, FocusRestored()).session
        session = apply(session, tab_switch).session

        assert session.strike_count == 2

    def test_other_kinds_count_while_focus_lost(self):
        session = apply(active_session(), violation(ViolationKind.TAB_SWITCH, "left")).session
        session = apply(session, violation(ViolationKind.BLOCKED_SHORTCUT, "F12")).session

        assert session.strike_count == 2


class TestTimer:
    """Tests for timer ticks"""

    def test_tick_decrements_by_one(self):
        result = apply(active_session(1), Tick())

        assert result.session.remaining_seconds == 59
        assert result.effects == ()

    def test_tick_to_zero_ends_and_finalizes_once(self):
        session = active_session(1)
        finalize_count = 0
        for _ in range(60):
            result = apply(session, Tick())
            session = result.session
            finalize_count += result.effects.count(Effect.FINALIZE)

        assert session.remaining_seconds == 0
        assert session.status == SessionStatus.ENDED
        assert session.is_disqualified is False
        assert finalize_count == 1

    def test_tick_ignored_when_not_active(self):
        session = apply(active_session(), EndQuiz()).session
        result = apply(session, Tick())

        assert result.session.remaining_seconds == session.remaining_seconds
        assert result.effects == ()

    def test_timer_and_violation_racing_finalize_once(self):
        session = replace(active_session(), remaining_seconds=1)
        session = apply(session, violation()).session
        session = apply(session, violation()).session

        expired = apply(session, Tick())
        late_violation = apply(expired.session, violation())

        assert expired.effects.count(Effect.FINALIZE) == 1
        assert late_violation.effects == ()
        assert late_violation.session.status == SessionStatus.ENDED

    def test_violation_first_then_tick_finalizes_once(self):
        session = replace(active_session(), remaining_seconds=1)
        for _ in range(2):
            session = apply(session, violation()).session

        disqualified = apply(session, violation())
        late_tick = apply(disqualified.session, Tick())

        assert disqualified.effects.count(Effect.FINALIZE) == 1
        assert late_tick.effects == ()
        assert late_tick.session.remaining_seconds == 1


class TestEnd:
    """Tests for ending a session"""

    def test_end_active_session(self):
        result = apply(active_session(), EndQuiz())

        assert result.session.status == SessionStatus.ENDED
        assert Effect.FINALIZE not in result.effects
        assert Effect.EXIT_FULLSCREEN in result.effects

    def test_end_twice_is_stable(self):
        first = apply(active_session(), EndQuiz())
        second = apply(first.session, EndQuiz())

        assert second.session == first.session
        assert Effect.FINALIZE not in second.effects

    def test_end_preserves_disqualification(self):
        session = active_session()
        for _ in range(3):
            session = apply(session, violation()).session

        result = apply(session, EndQuiz())

        assert result.session.status == SessionStatus.DISQUALIFIED
        assert result.session.disqualification_reason is not None

    def test_reason_set_only_when_disqualified(self):
        session = apply(active_session(), EndQuiz()).session

        assert session.status == SessionStatus.ENDED
        assert session.disqualification_reason is None


class TestModuleSource:
    def test_compiles_without_escape_warnings(self):
        import warnings
        from pathlib import Path

        from quizguard.security import transitions

        source = Path(transitions.__file__).read_text()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, transitions.__file__, "exec")
