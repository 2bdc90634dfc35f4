"""
Notification endpoints for the authenticated user
"""

import logging

from ninja import Router
from ninja.responses import codes_4xx

from notifications.schemas import (
    MarkAllEnvelope,
    NotificationEnvelope,
    NotificationListEnvelope,
    NotificationOut,
    UnreadCountEnvelope,
)
from notifications.services import NotificationService
from socialhub.schemas import EmptyEnvelope, ErrorOut, respond
from users.auth import JWTAuth

router = Router(tags=["Notifications"])

logger = logging.getLogger(__name__)


@router.get(
    "/",
    response={200: NotificationListEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def list_notifications(request, page: int = 1, limit: int = 20):
    result = NotificationService.get_notifications(request.auth, page, limit)
    data = result.as_dict(
        "notifications", [NotificationOut.from_model(n) for n in result.items]
    )
    data["unreadCount"] = NotificationService.get_unread_count(request.auth)
    return respond(200, "Notifications retrieved successfully", data)


@router.get(
    "/unread-count",
    response={200: UnreadCountEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def unread_count(request):
    count = NotificationService.get_unread_count(request.auth)
    return respond(200, "Unread count retrieved successfully", {"count": count})


@router.put(
    "/read-all",
    response={200: MarkAllEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def mark_all_as_read(request):
    updated = NotificationService.mark_all_as_read(request.auth)
    return respond(200, "All notifications marked as read", {"updated": updated})


@router.put(
    "/{notification_id}/read",
    response={200: NotificationEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def mark_as_read(request, notification_id: int):
    notification = NotificationService.mark_as_read(notification_id, request.auth)
    return respond(
        200,
        "Notification marked as read",
        {"notification": NotificationOut.from_model(notification)},
    )


@router.delete(
    "/{notification_id}",
    response={200: EmptyEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def delete_notification(request, notification_id: int):
    NotificationService.delete_notification(notification_id, request.auth)
    return respond(200, "Notification deleted successfully")
