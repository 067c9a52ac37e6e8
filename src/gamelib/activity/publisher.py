"""Publish committed activities to Redis pub/sub for live feeds."""

from __future__ import annotations

import json
import logging

from gamelib.config import get_settings
from gamelib.db.models import Activity

logger = logging.getLogger(__name__)


def activity_payload(activity: Activity) -> dict:
    return {
        "id": str(activity.id),
        "user_id": str(activity.user_id),
        "activity_type": activity.activity_type,
        "game_id": activity.game_id,
        "game_name": activity.game_name,
        "game_cover_url": activity.game_cover_url,
        "old_value": activity.old_value,
        "new_value": activity.new_value,
        "created_at": activity.created_at.isoformat() if activity.created_at else None,
    }


async def publish_activity(redis: object, activity: Activity | None) -> bool:
    """Publish one activity. Call only after the transaction has committed.

    Returns True if published. A missing Redis client or a publish failure is
    logged and never propagated: the activity is already durable.
    """
    if redis is None or activity is None:
        return False

    channel = get_settings().activity_pubsub_channel
    try:
        await redis.publish(channel, json.dumps(activity_payload(activity)))  # type: ignore[attr-defined]
    except Exception:
        logger.warning("Failed to publish activity %s", activity.id, exc_info=True)
        return False
    return True
