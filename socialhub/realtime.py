"""
Real-time event system for SocialHub
Routes events to the live WebSocket connection of a single user
"""

import json
import logging
from datetime import datetime
from typing import Dict, List, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def serialize_json(obj):
    """Custom JSON serializer that handles datetime objects"""
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


class EventTypes:
    """Constants for event types"""

    MESSAGE_NEW = "message:new"
    MESSAGE_READ = "message:read"
    NOTIFICATION_NEW = "notification:new"
    NOTIFICATION_DELETE = "notification:delete"
    COMMENT_NEW = "comment:new"
    COMMENT_LIKE = "comment:like"
    COMMENT_UNLIKE = "comment:unlike"
    POST_LIKE = "post:like"
    POST_UNLIKE = "post:unlike"
    USER_ONLINE = "user:online"
    USER_OFFLINE = "user:offline"


# Client cache tags marked stale when an event arrives. An entry is either a
# fixed id or the payload key holding the id.
INVALIDATES: Dict[str, List[Dict[str, str]]] = {
    EventTypes.MESSAGE_NEW: [
        {"type": "Conversation", "id": "LIST"},
        {"type": "Conversation", "id": "UNREAD_COUNT"},
        {"type": "Message", "key": "conversationId"},
    ],
    EventTypes.MESSAGE_READ: [
        {"type": "Conversation", "id": "LIST"},
        {"type": "Message", "key": "conversationId"},
    ],
    EventTypes.NOTIFICATION_NEW: [
        {"type": "Notification", "id": "LIST"},
        {"type": "Notification", "id": "UNREAD_COUNT"},
    ],
    EventTypes.NOTIFICATION_DELETE: [
        {"type": "Notification", "id": "LIST"},
        {"type": "Notification", "id": "UNREAD_COUNT"},
    ],
    EventTypes.POST_LIKE: [{"type": "Post", "key": "postId"}],
    EventTypes.POST_UNLIKE: [{"type": "Post", "key": "postId"}],
    EventTypes.COMMENT_NEW: [{"type": "Post", "key": "postId"}],
    EventTypes.COMMENT_LIKE: [{"type": "Comment", "key": "commentId"}],
    EventTypes.COMMENT_UNLIKE: [{"type": "Comment", "key": "commentId"}],
    EventTypes.USER_ONLINE: [{"type": "User", "key": "userId"}],
    EventTypes.USER_OFFLINE: [{"type": "User", "key": "userId"}],
}


def invalidation_tags(event: str, data: Dict) -> List[Dict]:
    """
    Resolve the cache tags a client should drop for this event.
    Tags whose id key is missing from the payload are skipped.
    """
    tags = []
    for rule in INVALIDATES.get(event, []):
        if "id" in rule:
            tags.append({"type": rule["type"], "id": rule["id"]})
        elif data.get(rule["key"]) is not None:
            tags.append({"type": rule["type"], "id": data[rule["key"]]})
    return tags


class ConnectionRegistry:
    """
    Maps a user id to the channel name of that user's live connection.

    One connection per user: a new connection replaces the previous entry.
    Mutations run on the event loop thread or under the GIL, so there is no
    lock around the dict.
    """

    def __init__(self):
        self._connections: Dict[int, str] = {}

    def register(self, user_id: int, channel_name: str) -> Optional[str]:
        previous = self._connections.get(user_id)
        self._connections[user_id] = channel_name
        if previous and previous != channel_name:
            logger.info(f"User {user_id} reconnected, replacing {previous}")
        return previous

    def unregister(self, user_id: int, channel_name: str) -> bool:
        """
        Drop the entry only while it still points at ``channel_name``; a late
        disconnect of a replaced connection leaves the newer one in place.
        """
        if self._connections.get(user_id) != channel_name:
            return False
        del self._connections[user_id]
        return True

    def get(self, user_id: int) -> Optional[str]:
        return self._connections.get(user_id)

    def is_online(self, user_id: int) -> bool:
        return user_id in self._connections

    def online_user_ids(self) -> List[int]:
        return list(self._connections)

    def clear(self):
        self._connections.clear()

    def __len__(self):
        return len(self._connections)


registry = ConnectionRegistry()


def build_message(event: str, data: Dict) -> Dict:
    # Round-trip through JSON so the Redis channel layer can serialize it
    data = json.loads(json.dumps(data, default=serialize_json))
    return {
        "type": "push.event",
        "event": event,
        "data": data,
        "invalidates": invalidation_tags(event, data),
    }


def emit_to_user(user_id: int, event: str, data: Dict) -> bool:
    """
    Push an event to a user's live connection from synchronous code.

    Returns False when the user has no live connection or delivery failed.
    Failures are logged and never raised to the caller.
    """
    channel_name = registry.get(user_id)
    if channel_name is None:
        logger.debug(f"Dropped {event} for user {user_id}: not connected")
        return False

    try:
        message = build_message(event, data)
        channel_layer = get_channel_layer()
        async_to_sync(channel_layer.send)(channel_name, message)
    except Exception as e:
        logger.error(f"Failed to push {event} to user {user_id}: {e}", exc_info=True)
        return False

    logger.info(f"Pushed {event} to user {user_id}")
    return True


async def aemit_to_user(user_id: int, event: str, data: Dict) -> bool:
    """Async counterpart of emit_to_user for use inside consumers."""
    channel_name = registry.get(user_id)
    if channel_name is None:
        logger.debug(f"Dropped {event} for user {user_id}: not connected")
        return False

    try:
        message = build_message(event, data)
        channel_layer = get_channel_layer()
        await channel_layer.send(channel_name, message)
    except Exception as e:
        logger.error(f"Failed to push {event} to user {user_id}: {e}", exc_info=True)
        return False

    logger.info(f"Pushed {event} to user {user_id}")
    return True
