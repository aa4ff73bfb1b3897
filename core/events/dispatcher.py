"""
FOS Event Bus — Dispatcher
============================
Routes engine events to registered subscribers.

Dispatch behavior:
1. Look up subscribers by event_type
2. Execute handlers sequentially
3. Catch subscriber exceptions per handler, log, continue

Notifications are fire-and-forget: a failing subscriber never
breaks the engine operation that announced the event.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from core.events.registry import SubscriberRegistry

logger = logging.getLogger("fos.events")


@dataclass(frozen=True)
class DomainEvent:
    """An announcement that something happened in an engine."""
    event_type: str
    payload: Dict[str, Any]
    occurred_at: datetime
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
        }


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> dict:
    """
    Dispatch an event to all registered subscribers.

    Returns:
        {
            'event_type': str,
            'event_id': str,
            'subscribers_notified': int,
            'subscribers_failed': int,
            'failures': list[dict]
        }

    This function NEVER raises for subscriber failures.
    """
    event_type = event.event_type
    event_id = str(event.event_id)

    result = {
        "event_type": event_type,
        "event_id": event_id,
        "subscribers_notified": 0,
        "subscribers_failed": 0,
        "failures": [],
    }

    subscribers = registry.get_subscribers(event_type)
    if not subscribers:
        logger.debug(f"No subscribers for '{event_type}' (event_id: {event_id})")
        return result

    for handler, subscriber_name in subscribers:
        handler_name = getattr(handler, "__qualname__", str(handler))
        try:
            handler(event)
            result["subscribers_notified"] += 1
        except Exception as exc:
            result["subscribers_failed"] += 1
            result["failures"].append({
                "handler": handler_name,
                "subscriber": subscriber_name,
                "error": str(exc),
                "error_type": type(exc).__name__,
            })
            logger.error(
                f"Subscriber failed: {handler_name} for "
                f"{event_type} (event_id: {event_id}): {exc}",
                exc_info=True,
            )

    logger.info(
        f"Dispatch complete: {event_type} (event_id: {event_id}) — "
        f"{result['subscribers_notified']} notified, "
        f"{result['subscribers_failed']} failed"
    )
    return result


def publish(
    registry: Optional[SubscriberRegistry],
    event_type: str,
    payload: Dict[str, Any],
    occurred_at: datetime,
) -> Optional[DomainEvent]:
    """Build and dispatch an event; no-op when no registry is wired."""
    if registry is None:
        return None
    event = DomainEvent(
        event_type=event_type, payload=payload, occurred_at=occurred_at,
    )
    dispatch(event, registry)
    return event
