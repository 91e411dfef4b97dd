"""
Quiz Guard Security Module

Client-side anti-cheating monitor for timed quizzes. Detects:
- Tab switches and window focus loss
- Context menu (right-click) requests
- Blocked keyboard shortcuts (devtools, view source, save, print, refresh)
- Leaving fullscreen presentation mode

Strikes escalate per the configured policy; a disqualified attempt
is scored as zero.
"""

from .api import router
from .events import BrowserEvent, Channel, EventSource, InMemoryEventSource
from .models import (
    Notice,
    QuizDisposition,
    QuizSession,
    SessionStatus,
    Violation,
    ViolationKind,
)
from .monitor import QuizSecurityMonitor, format_time
from .presentation import FullscreenError, NullPresentation, PresentationMode
from .timer import AsyncioTicker

__all__ = [
    "router",
    "BrowserEvent",
    "Channel",
    "EventSource",
    "InMemoryEventSource",
    "Notice",
    "QuizDisposition",
    "QuizSession",
    "SessionStatus",
    "Violation",
    "ViolationKind",
    "QuizSecurityMonitor",
    "format_time",
    "FullscreenError",
    "NullPresentation",
    "PresentationMode",
    "AsyncioTicker",
]
