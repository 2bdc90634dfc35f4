from django.db import models

from posts.models import Comment, Post
from users.models import User


class Notification(models.Model):
    class NotificationType(models.TextChoices):
        LIKE = "like", "Like"
        UNLIKE = "unlike", "Unlike"
        COMMENT = "comment", "Comment"
        COMMENT_REPLY = "comment_reply", "Comment Reply"
        COMMENT_LIKE = "comment_like", "Comment Like"
        FOLLOW = "follow", "Follow"
        UNFOLLOW = "unfollow", "Unfollow"

    recipient = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notifications"
    )
    sender = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="sent_notifications"
    )
    type = models.CharField(max_length=20, choices=NotificationType.choices)
    post = models.ForeignKey(
        Post, on_delete=models.CASCADE, null=True, blank=True, related_name="+"
    )
    comment = models.ForeignKey(
        Comment, on_delete=models.CASCADE, null=True, blank=True, related_name="+"
    )
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "-created_at"], name="notification_recipient_idx"),
            models.Index(fields=["recipient", "is_read"], name="notification_unread_idx"),
        ]

    def __str__(self):
        return f"{self.type} for {self.recipient_id} from {self.sender_id}"
