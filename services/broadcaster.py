"""
Fan-out of dashboard events to live subscribers.

Publishers append to a bounded replay buffer and wake every waiting subscriber
through a shared condition variable. Each subscriber remembers the sequence
number it last saw, so events published while it was busy are still delivered
in order as long as they remain in the buffer. A subscriber that falls more
than a buffer behind skips the oldest events. Joining never replays history.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Deque, Tuple

from models.events import DashboardEvent, EventType

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 100


class DashboardBroadcaster:
    """In-memory event relay built on asyncio primitives."""

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._events: Deque[Tuple[int, DashboardEvent]] = deque(maxlen=buffer_size)
        self._condition = asyncio.Condition()
        self._sequence = 0
        self._subscribers = 0

    @property
    def subscriber_count(self) -> int:
        return self._subscribers

    async def publish(self, event_type: EventType, payload: Any = None) -> DashboardEvent:
        """
        Record an event and notify all subscribers.

        Args:
            event_type: Kind of update being broadcast
            payload: JSON-compatible body

        Returns:
            The published event with its timestamp
        """
        async with self._condition:
            event = DashboardEvent(type=event_type, payload=payload, timestamp=time.time())
            self._sequence += 1
            self._events.append((self._sequence, event))
            self._condition.notify_all()

        logger.debug(
            "Published %s event",
            event_type.value,
            extra={"subscriber_count": self._subscribers},
        )
        return event

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[DashboardEvent, None], None]:
        """
        Subscribe to events published after entering the context.

        Yields:
            An async generator of DashboardEvent objects
        """
        async with self._condition:
            start = self._sequence
            self._subscribers += 1

        async def event_generator() -> AsyncGenerator[DashboardEvent, None]:
            last_seen = start
            while True:
                async with self._condition:
                    await self._condition.wait_for(lambda: self._sequence > last_seen)
                    pending = [(seq, event) for seq, event in self._events if seq > last_seen]
                    last_seen = self._sequence
                for _, event in pending:
                    yield event

        try:
            yield event_generator()
        finally:
            async with self._condition:
                self._subscribers -= 1
