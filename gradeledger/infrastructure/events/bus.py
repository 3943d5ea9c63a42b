# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-process event bus for domain events.

Domain services publish after their transaction commits. Subscribers
(notification senders, audit writers) are external to the workflow
engine: a failing handler is logged and never reaches the publisher.

Example:
    from gradeledger.infrastructure.events import get_event_bus, EventTypes

    event_bus = get_event_bus()

    async def notify_student(event):
        await mailer.send(event.payload["student_id"], ...)

    event_bus.subscribe(EventTypes.Enrollment.VERIFIED, notify_student)
    event_bus.subscribe("enrollment.*", audit_handler)
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable
from uuid import uuid4

from gradeledger.infrastructure.events.types import EventAudience, EventRegistry
from gradeledger.utils.datetime import format_iso, utc_now

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


def _is_pattern(event_type: str) -> bool:
    return "*" in event_type or "?" in event_type


@dataclass
class EventData:
    """A domain event as delivered to subscribers.

    audience and recipient_id tell a notification subscriber who to
    address: tutors for a new submission, the owning student for a
    decision. Other events notify nobody.
    """

    event_type: str
    payload: dict[str, Any]
    actor_id: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "payload": self.payload,
            "actor_id": self.actor_id,
            "timestamp": format_iso(self.timestamp),
            "audience": self.audience,
        }

    @property
    def audience(self) -> str | None:
        return EventRegistry.get_audience(self.event_type)

    @property
    def recipient_id(self) -> str | None:
        """Student to notify, for student-facing events."""
        if self.audience != EventAudience.STUDENT:
            return None
        return self.payload.get("student_id")


class EventBus:
    """In-memory async event bus with wildcard subscriptions.

    Designed for single-process async use; handlers for one event run
    concurrently.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._pattern_handlers: dict[str, list[EventHandler]] = {}
        self._event_count = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe a handler to an event type or wildcard pattern.

        Args:
            event_type: Event type string or pattern such as "enrollment.*".
            handler: Async function called with the EventData.
        """
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        registry.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed handler to: %s", event_type)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Remove a handler.

        Returns:
            True if the handler was found and removed, False otherwise.
        """
        registry = self._pattern_handlers if _is_pattern(event_type) else self._handlers
        handlers = registry.get(event_type)
        if not handlers or handler not in handlers:
            return False

        handlers.remove(handler)
        if not handlers:
            del registry[event_type]
        return True

    def _matching_handlers(self, event_type: str) -> list[EventHandler]:
        matched = list(self._handlers.get(event_type, []))
        for pattern, handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(event_type, pattern):
                matched.extend(handlers)
        return matched

    async def publish(
        self,
        event_type: str,
        payload: dict[str, Any],
        actor_id: str | None = None,
    ) -> EventData:
        """Publish an event to all matching subscribers.

        Errors in individual handlers are logged and do not stop the
        other handlers or propagate to the publisher.

        Args:
            event_type: The event type string.
            payload: Event data dictionary.
            actor_id: Principal that caused the event.

        Returns:
            EventData object with event metadata.
        """
        event = EventData(event_type=event_type, payload=payload, actor_id=actor_id)
        self._event_count += 1

        handlers = self._matching_handlers(event_type)
        if not handlers:
            logger.debug("No handlers for event: %s", event_type)
            return event

        logger.debug(
            "Publishing event %s to %d handlers: audience=%s",
            event_type,
            len(handlers),
            event.audience,
        )

        async def safe_call(handler: EventHandler) -> None:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "Handler error for event %s: %s",
                    event_type,
                    str(e),
                    exc_info=True,
                )

        await asyncio.gather(*[safe_call(handler) for handler in handlers])
        return event

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        self._pattern_handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get subscription and publish counts."""
        return {
            "exact_subscriptions": len(self._handlers),
            "pattern_subscriptions": len(self._pattern_handlers),
            "total_handlers": sum(len(h) for h in self._handlers.values())
            + sum(len(h) for h in self._pattern_handlers.values()),
            "events_published": self._event_count,
        }


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the event bus singleton.

    Useful for testing to ensure clean state between tests.
    """
    global _event_bus
    if _event_bus is not None:
        _event_bus.clear()
    _event_bus = None
