"""
Asyncio Ticker - One-second timer channel driven by the event loop
"""

import asyncio
import logging
from typing import List, Optional

from ..config import settings
from .events import BrowserEvent, Channel, EventSource, Handler

logger = logging.getLogger(__name__)


class AsyncioTicker(EventSource):
    """
    Serves Channel.TIMER_TICK from a running asyncio loop.

    The first subscriber starts the cadence with `loop.call_later`;
    removing the last subscriber cancels the pending callback.
    """

    def __init__(self, interval: Optional[float] = None, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.interval = interval if interval is not None else settings.TICK_INTERVAL_SECONDS
        self._loop = loop
        self._handlers: List[Handler] = []
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def subscribe(self, channel: Channel, handler: Handler) -> None:
        if channel != Channel.TIMER_TICK:
            raise ValueError(f"AsyncioTicker only serves {Channel.TIMER_TICK.value}, got {channel.value}")
        if handler not in self._handlers:
            self._handlers.append(handler)
        if self._handle is None:
            self._schedule()

    def unsubscribe(self, channel: Channel, handler: Handler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)
        if not self._handlers:
            self.stop()

    def stop(self):
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self):
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval, self._fire)

    def _fire(self):
        self._handle = None
        for handler in list(self._handlers):
            try:
                handler(BrowserEvent.tick())
            except Exception as e:
                logger.error(f"Tick handler failed: {e}")
        # Handlers may have unsubscribed (quiz ended) during this tick
        if self._handlers and self._handle is None:
            self._schedule()
