"""
interview_schedule/services/events.py

Best-effort notification channel.

Events are pushed to a Redis list (settings.notifications_queue) for an
external consumer (mail / chat delivery). Emitting never raises: a failed
push is logged and the caller carries on, so a notification problem can
never undo a committed booking or cancellation.
"""

import json
import time
import logging

from ..config import settings
from ..redis_client import get_redis

logger = logging.getLogger(__name__)


def emit_event(event_type: str, payload: dict) -> bool:
    """
    Emit an event for instant delivery.

    Returns True if the event was queued.
    """
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis = get_redis()
        if redis is None:
            logger.info(f"Event {event_type} not queued (no Redis configured): {payload}")
            return False
        redis.rpush(settings.notifications_queue, json.dumps(event, default=str))
        logger.info(f"Event emitted: {event_type} → {settings.notifications_queue}")
        return True
    except Exception as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
