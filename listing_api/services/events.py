"""
listing_api/services/events.py

Event emitter: pushes visit events to a Redis list for consumption by the
notification worker (agent and visitor notifications).
"""

import json
import time
import logging

from redis.exceptions import RedisError

from ..config import settings
from ..redis_client import redis_client

logger = logging.getLogger(__name__)


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Emit a p2p event (instant delivery).

    Returns False when the event could not be queued; the caller decides
    how to report that.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis_client.rpush(settings.events_queue, json.dumps(event, default=str))
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False

    logger.info(f"Event emitted: {event_type} → {settings.events_queue}")
    return True
