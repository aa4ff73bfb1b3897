"""
FOS Event Bus — Public API
============================
Engines announce; subscribers (notifications, dashboards) listen.
"""

from core.events.dispatcher import DomainEvent, dispatch, publish
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
)
from core.events.registry import SubscriberRegistry

__all__ = [
    "DomainEvent",
    "dispatch",
    "publish",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
]
