"""
Notification engine: persists notifications for user actions and pushes
them to the recipient's live connection.
"""

import logging
from typing import Optional

from django.utils import timezone

from notifications.models import Notification
from notifications.schemas import NotificationOut
from socialhub.constants import NOTIFICATIONS_PAGE
from socialhub.errors import NotFound
from socialhub.pagination import Page, paginate
from socialhub.realtime import EventTypes, emit_to_user

logger = logging.getLogger(__name__)


class NotificationService:
    @staticmethod
    def create_notification(
        recipient, sender, type: str, post=None, comment=None
    ) -> Optional[Notification]:
        """
        Persist a notification and push ``notification:new`` to the recipient.
        Acting on your own content notifies nobody.
        """
        if recipient.id == sender.id:
            return None

        notification = Notification.objects.create(
            recipient=recipient,
            sender=sender,
            type=type,
            post=post,
            comment=comment,
        )
        logger.info(
            f"Notification {notification.id} ({type}) for user {recipient.id} "
            f"from user {sender.id}"
        )

        emit_to_user(
            recipient.id,
            EventTypes.NOTIFICATION_NEW,
            NotificationOut.from_model(notification).model_dump(mode="json"),
        )
        return notification

    @staticmethod
    def delete_notification_by_action(
        recipient, sender, type: str, post=None, comment=None
    ) -> int:
        """
        Remove the notifications created by an action that was just undone.
        Returns the number of rows removed.
        """
        filters = {"recipient": recipient, "sender": sender, "type": type}
        if post is not None:
            filters["post"] = post
        if comment is not None:
            filters["comment"] = comment

        notification_ids = list(
            Notification.objects.filter(**filters).values_list("id", flat=True)
        )
        if not notification_ids:
            return 0

        Notification.objects.filter(id__in=notification_ids).delete()
        for notification_id in notification_ids:
            emit_to_user(
                recipient.id,
                EventTypes.NOTIFICATION_DELETE,
                {"notificationId": notification_id},
            )
        return len(notification_ids)

    @staticmethod
    def get_notifications(user, page, limit) -> Page:
        queryset = (
            Notification.objects.filter(recipient=user)
            .select_related("sender")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, NOTIFICATIONS_PAGE)

    @staticmethod
    def get_unread_count(user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).count()

    @staticmethod
    def mark_as_read(notification_id: int, user) -> Notification:
        # A notification owned by someone else is reported as missing
        notification = (
            Notification.objects.select_related("sender")
            .filter(pk=notification_id, recipient=user)
            .first()
        )
        if notification is None:
            raise NotFound("Notification")

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return notification

    @staticmethod
    def mark_all_as_read(user) -> int:
        return Notification.objects.filter(recipient=user, is_read=False).update(
            is_read=True, updated_at=timezone.now()
        )

    @staticmethod
    def delete_notification(notification_id: int, user):
        deleted, _ = Notification.objects.filter(
            pk=notification_id, recipient=user
        ).delete()
        if not deleted:
            raise NotFound("Notification")
