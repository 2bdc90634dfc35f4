from datetime import datetime
from typing import List, Optional

from ninja import Schema

from socialhub.schemas import Envelope, UserPublic


class NotificationOut(Schema):
    id: int
    sender: UserPublic
    type: str
    postId: Optional[int] = None
    commentId: Optional[int] = None
    isRead: bool
    createdAt: datetime

    @staticmethod
    def from_model(notification) -> "NotificationOut":
        return NotificationOut(
            id=notification.id,
            sender=UserPublic.from_model(notification.sender),
            type=notification.type,
            postId=notification.post_id,
            commentId=notification.comment_id,
            isRead=notification.is_read,
            createdAt=notification.created_at,
        )


class NotificationListData(Schema):
    notifications: List[NotificationOut]
    total: int
    page: int
    pages: int
    unreadCount: int


class NotificationListEnvelope(Envelope):
    data: NotificationListData


class NotificationData(Schema):
    notification: NotificationOut


class NotificationEnvelope(Envelope):
    data: NotificationData


class UnreadCountData(Schema):
    count: int


class UnreadCountEnvelope(Envelope):
    data: UnreadCountData


class MarkAllData(Schema):
    updated: int


class MarkAllEnvelope(Envelope):
    data: MarkAllData
