"""
backend/booking_engine/services/events.py

Event emitter: pushes booking events to a Redis queue for notification
consumers.

Queue:
- events:p2p: instant delivery (booking created / status changed)

Delivery is best effort. A booking is already committed when its event is
emitted, so failures are logged and never raised.
"""

import json
import time
import logging

from redis.exceptions import RedisError

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Emit a p2p event.

    Returns:
        True if the event was queued, False if skipped or failed.
    """
    if redis_client is None:
        logger.debug(f"Events disabled, skipping {event_type}")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(P2P_QUEUE, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False


def booking_payload(booking) -> dict:
    return {
        "booking_id": booking.id,
        "business_id": booking.business_id,
        "employee_id": booking.employee_id,
        "requester_id": booking.requester_id,
        "provider_id": booking.provider_id,
        "status": booking.status,
        "scheduled_at": booking.scheduled_at.isoformat() + "Z",
    }
