# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain event infrastructure.

Components:
- EventBus: In-memory pub/sub with pattern matching
- EventTypes: Centralized event type constants
- EventRegistry: Notification audience per event type

Quick Start:
    from gradeledger.infrastructure.events import get_event_bus, EventTypes

    event_bus = get_event_bus()
    event_bus.subscribe(EventTypes.Enrollment.CREATED, notify_tutors)
"""

from gradeledger.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from gradeledger.infrastructure.events.types import (
    EventAudience,
    EventPatterns,
    EventRegistry,
    EventTypes,
)

__all__ = [
    # Event Bus
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    # Event Types
    "EventAudience",
    "EventPatterns",
    "EventRegistry",
    "EventTypes",
]
