"""
Pytest Configuration for Quiz Guard Tests
"""
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quizguard.security.events import InMemoryEventSource
from quizguard.security.presentation import FullscreenError, PresentationMode


class FakePresentation(PresentationMode):
    """Records fullscreen calls; `allow=False` denies every request"""

    def __init__(self, allow: bool = True):
        self.allow = allow
        self._fullscreen = False
        self.request_calls = 0
        self.exit_calls = 0

    @property
    def is_fullscreen(self) -> bool:
        return self._fullscreen

    def request_fullscreen(self) -> None:
        self.request_calls += 1
        if not self.allow:
            raise FullscreenError("Permission denied")
        self._fullscreen = True

    def exit_fullscreen(self) -> None:
        self.exit_calls += 1
        self._fullscreen = False

    def leave(self):
        """Simulate the user pressing Esc"""
        self._fullscreen = False


class SteppingClock:
    """Returns a strictly increasing time on every call"""

    def __init__(self, start: datetime = None, step_seconds: float = 1.0):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = timedelta(seconds=step_seconds)

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


@pytest.fixture
def events():
    """In-memory event source"""
    return InMemoryEventSource()


@pytest.fixture
def presentation():
    """Fullscreen adapter that grants requests"""
    return FakePresentation()


@pytest.fixture
def finalized():
    """Collects dispositions passed to the finish callback"""
    return []


@pytest.fixture
def monitor(events, presentation, finalized):
    """Monitor wired to synthetic events with the three-strike policy"""
    from quizguard.security.monitor import QuizSecurityMonitor
    from quizguard.security.scoring import THREE_STRIKE_POLICY

    return QuizSecurityMonitor(
        events=events,
        presentation=presentation,
        on_finalize=finalized.append,
        policy=THREE_STRIKE_POLICY,
        clock=SteppingClock(),
        default_minutes=30,
        session_id="QZ_TEST"
    )


@pytest.fixture(scope='session')
def app():
    """Create FastAPI app for testing"""
    from quizguard.main import app
    return app


@pytest.fixture(scope='function')
def client(app):
    """FastAPI test client with a clean result store"""
    from quizguard.security import api

    api._results.clear()
    return TestClient(app)
