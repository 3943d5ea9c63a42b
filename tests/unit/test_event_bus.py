# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the domain event bus."""

import pytest

from gradeledger.infrastructure.events import (
    EventAudience,
    EventBus,
    EventPatterns,
    EventRegistry,
    EventTypes,
    get_event_bus,
    reset_event_bus,
)


class TestEventBus:
    """Tests for EventBus publish/subscribe."""

    @pytest.mark.asyncio
    async def test_exact_subscription(self) -> None:
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(EventTypes.Enrollment.VERIFIED, handler)
        event = await bus.publish(
            EventTypes.Enrollment.VERIFIED,
            {"enrollment_id": "e1"},
            actor_id="tutor-1",
        )

        assert received == [event]
        assert event.actor_id == "tutor-1"
        assert event.to_dict()["payload"] == {"enrollment_id": "e1"}

    @pytest.mark.asyncio
    async def test_pattern_subscription(self) -> None:
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event.event_type)

        bus.subscribe(EventPatterns.ALL_ENROLLMENT, handler)
        await bus.publish(EventTypes.Enrollment.CREATED, {})
        await bus.publish(EventTypes.Course.CREATED, {})

        assert received == [EventTypes.Enrollment.CREATED]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_reach_publisher(self) -> None:
        bus = EventBus()
        received = []

        async def broken(event):
            raise RuntimeError("smtp down")

        async def working(event):
            received.append(event.event_type)

        bus.subscribe(EventTypes.Enrollment.REJECTED, broken)
        bus.subscribe(EventTypes.Enrollment.REJECTED, working)

        await bus.publish(EventTypes.Enrollment.REJECTED, {})

        assert received == [EventTypes.Enrollment.REJECTED]

    @pytest.mark.asyncio
    async def test_unsubscribe(self) -> None:
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe("course.*", handler)

        assert bus.unsubscribe("course.*", handler) is True
        assert bus.unsubscribe("course.*", handler) is False

        await bus.publish(EventTypes.Course.DELETED, {})
        assert received == []

    @pytest.mark.asyncio
    async def test_stats(self) -> None:
        bus = EventBus()

        async def handler(event):
            return None

        bus.subscribe(EventTypes.Course.CREATED, handler)
        bus.subscribe(EventPatterns.ALL, handler)
        await bus.publish(EventTypes.Course.CREATED, {})

        stats = bus.get_stats()
        assert stats["total_handlers"] == 2
        assert stats["events_published"] == 1

    def test_singleton_reset(self) -> None:
        first = get_event_bus()

        assert get_event_bus() is first

        reset_event_bus()
        assert get_event_bus() is not first


class TestEventRegistry:
    """Tests for notification audiences."""

    def test_submission_goes_to_tutors(self) -> None:
        assert EventRegistry.get_audience(EventTypes.Enrollment.CREATED) == EventAudience.TUTOR

    @pytest.mark.parametrize(
        "event_type",
        [EventTypes.Enrollment.VERIFIED, EventTypes.Enrollment.REJECTED],
    )
    def test_decisions_go_to_students(self, event_type: str) -> None:
        assert EventRegistry.get_audience(event_type) == EventAudience.STUDENT
        assert EventRegistry.is_decision_event(event_type)

    def test_course_events_notify_nobody(self) -> None:
        assert EventRegistry.get_audience(EventTypes.Course.UPDATED) is None

    @pytest.mark.asyncio
    async def test_decision_event_addresses_owner(self) -> None:
        event = await EventBus().publish(
            EventTypes.Enrollment.VERIFIED,
            {"enrollment_id": "e1", "student_id": "7"},
            actor_id="tutor-1",
        )

        assert event.audience == EventAudience.STUDENT
        assert event.recipient_id == "7"
        assert event.to_dict()["audience"] == "student"

    @pytest.mark.asyncio
    async def test_submission_event_has_no_single_recipient(self) -> None:
        event = await EventBus().publish(
            EventTypes.Enrollment.CREATED,
            {"enrollment_id": "e1", "student_id": "7"},
        )

        assert event.audience == EventAudience.TUTOR
        assert event.recipient_id is None
