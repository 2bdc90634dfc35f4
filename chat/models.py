from django.db import models

from users.models import User


class Conversation(models.Model):
    """
    Direct conversation between two users. Participants are stored ordered
    by id so each unordered pair maps to exactly one row.
    """

    participant_one = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="conversations_as_first"
    )
    participant_two = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="conversations_as_second"
    )
    last_message = models.ForeignKey(
        "Message",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["participant_one", "participant_two"],
                name="unique_conversation_pair",
            )
        ]
        indexes = [
            models.Index(fields=["-last_message_at"], name="conversation_last_msg_idx")
        ]

    def __str__(self):
        return f"Conversation {self.participant_one_id} <-> {self.participant_two_id}"

    @staticmethod
    def ordered_pair(user_id: int, other_id: int):
        return (user_id, other_id) if user_id < other_id else (other_id, user_id)

    @property
    def participant_ids(self):
        return (self.participant_one_id, self.participant_two_id)

    def has_participant(self, user) -> bool:
        return user.id in self.participant_ids

    def other_participant_id(self, user) -> int:
        if user.id == self.participant_one_id:
            return self.participant_two_id
        return self.participant_one_id


class Message(models.Model):
    conversation = models.ForeignKey(
        Conversation, on_delete=models.CASCADE, related_name="messages"
    )
    sender = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="sent_messages"
    )
    content = models.CharField(max_length=1000)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["conversation", "-created_at"], name="message_conversation_idx"),
            models.Index(fields=["conversation", "is_read"], name="message_unread_idx"),
        ]

    def __str__(self):
        return f"Message {self.pk} from {self.sender_id}"
