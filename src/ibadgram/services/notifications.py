"""Post-commit publication of domain events."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Protocol

from ..domain.events import DomainEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[DomainEvent], Awaitable[None]]


class NotificationBus(Protocol):
    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event``; delivery problems never reach the caller."""


class LocalNotificationBus:
    """In-process bus dispatching events to subscribers by event type."""

    def __init__(self) -> None:
        self._subscribers: dict[type[DomainEvent], list[Subscriber]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], subscriber: Subscriber) -> None:
        self._subscribers[event_type].append(subscriber)

    async def publish(self, event: DomainEvent) -> None:
        for subscriber in self._subscribers.get(type(event), ()):
            try:
                await subscriber(event)
            except Exception:
                logger.exception("subscriber failed", extra={"event": event.name})


class NullNotificationBus:
    async def publish(self, event: DomainEvent) -> None:
        logger.debug("event dropped", extra={"event": event.name})


__all__ = ["LocalNotificationBus", "NotificationBus", "NullNotificationBus", "Subscriber"]
