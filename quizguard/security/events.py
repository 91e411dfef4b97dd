"""
Event Sources - Browser signal channels consumed by the quiz monitor

The monitor never touches window/document globals. A host adapter
(browser bridge, websocket relay, test harness) implements EventSource
and forwards each signal as a BrowserEvent on its channel.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    """Monitored signal channels"""
    VISIBILITY = "visibility"            # blur / focus / visibilitychange
    CONTEXT_MENU = "context_menu"
    KEYDOWN = "keydown"
    FULLSCREEN_CHANGE = "fullscreen_change"
    TIMER_TICK = "timer_tick"


@dataclass
class BrowserEvent:
    """
    A single signal delivered on a channel.

    Only the fields relevant to the channel are meaningful:
    `hidden` for VISIBILITY, `key` and modifiers for KEYDOWN,
    `fullscreen` (state after the change) for FULLSCREEN_CHANGE.
    """
    channel: Channel
    hidden: bool = False
    key: Optional[str] = None
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False
    fullscreen: bool = True
    default_prevented: bool = False

    def prevent_default(self):
        """Cancel the browser's default action for this event."""
        self.default_prevented = True

    # Convenience constructors

    @classmethod
    def blur(cls) -> "BrowserEvent":
        return cls(Channel.VISIBILITY, hidden=True)

    @classmethod
    def focus(cls) -> "BrowserEvent":
        return cls(Channel.VISIBILITY, hidden=False)

    @classmethod
    def context_menu(cls) -> "BrowserEvent":
        return cls(Channel.CONTEXT_MENU)

    @classmethod
    def keydown(cls, key: str, ctrl: bool = False, shift: bool = False,
                alt: bool = False, meta: bool = False) -> "BrowserEvent":
        return cls(Channel.KEYDOWN, key=key, ctrl=ctrl, shift=shift, alt=alt, meta=meta)

    @classmethod
    def fullscreen_change(cls, fullscreen: bool) -> "BrowserEvent":
        return cls(Channel.FULLSCREEN_CHANGE, fullscreen=fullscreen)

    @classmethod
    def tick(cls) -> "BrowserEvent":
        return cls(Channel.TIMER_TICK)


Handler = Callable[[BrowserEvent], None]


class EventSource(ABC):
    """Subscribe/unsubscribe capability per channel"""

    @abstractmethod
    def subscribe(self, channel: Channel, handler: Handler) -> None:
        """Register a handler for a channel."""

    @abstractmethod
    def unsubscribe(self, channel: Channel, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""


class InMemoryEventSource(EventSource):
    """
    Synchronous in-process event source.

    Hosts forward raw signals with `dispatch`; handlers run in
    registration order on the caller's stack.
    """

    def __init__(self):
        self._handlers: Dict[Channel, List[Handler]] = {}

    def subscribe(self, channel: Channel, handler: Handler) -> None:
        handlers = self._handlers.setdefault(channel, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, channel: Channel, handler: Handler) -> None:
        handlers = self._handlers.get(channel, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, channel: Optional[Channel] = None) -> int:
        if channel is not None:
            return len(self._handlers.get(channel, []))
        return sum(len(h) for h in self._handlers.values())

    def dispatch(self, event: BrowserEvent) -> BrowserEvent:
        """Deliver an event to every current subscriber of its channel."""
        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event.channel, [])):
            handler(event)
        return event
