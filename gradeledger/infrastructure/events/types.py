# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions for gradeledger.

Adding a new event:
1. Add constant to appropriate class here
2. If someone should be notified about it, register the audience in EventRegistry
3. Pattern subscribers catch the new event automatically
"""


class EventTypes:
    """All event types organized by domain."""

    class Enrollment:
        """Enrollment workflow events."""

        CREATED = "enrollment.created"
        UPDATED = "enrollment.updated"
        DELETED = "enrollment.deleted"
        VERIFIED = "enrollment.verified"
        REJECTED = "enrollment.rejected"

    class Course:
        """Course catalog events."""

        CREATED = "course.created"
        UPDATED = "course.updated"
        DELETED = "course.deleted"


class EventPatterns:
    """Wildcard patterns for subscribing to groups of events."""

    ALL_ENROLLMENT = "enrollment.*"
    ALL_COURSE = "course.*"

    # Global wildcard
    ALL = "*"


class EventAudience:
    """Who a notification subscriber should address for an event."""

    TUTOR = "tutor"
    STUDENT = "student"


class EventRegistry:
    """Registry for event metadata."""

    # A new submission needs a reviewer; a decision goes back to the student.
    _audience_map: dict[str, str] = {
        EventTypes.Enrollment.CREATED: EventAudience.TUTOR,
        EventTypes.Enrollment.VERIFIED: EventAudience.STUDENT,
        EventTypes.Enrollment.REJECTED: EventAudience.STUDENT,
    }

    @classmethod
    def get_audience(cls, event_type: str) -> str | None:
        """Get the notification audience for an event type.

        Args:
            event_type: The event type string.

        Returns:
            Audience name or None if nobody is notified.
        """
        return cls._audience_map.get(event_type)

    @classmethod
    def is_decision_event(cls, event_type: str) -> bool:
        """Check whether the event records a verifier's decision."""
        return event_type in (EventTypes.Enrollment.VERIFIED, EventTypes.Enrollment.REJECTED)
