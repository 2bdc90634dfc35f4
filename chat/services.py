"""
Direct messaging between two users
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from chat.models import Conversation, Message
from chat.schemas import MessageOut
from socialhub.constants import CONVERSATIONS_PAGE, MESSAGES_PAGE
from socialhub.errors import Forbidden, NotFound, ValidationFailed
from socialhub.pagination import Page, paginate
from socialhub.realtime import EventTypes, emit_to_user
from users.services import get_visible_user

logger = logging.getLogger(__name__)


def get_participant_conversation(conversation_id: int, user) -> Conversation:
    conversation = Conversation.objects.filter(pk=conversation_id).first()
    if conversation is None:
        raise NotFound("Conversation")
    if not conversation.has_participant(user):
        raise Forbidden("You are not a participant in this conversation")
    return conversation


def get_or_create_conversation(first_id: int, second_id: int):
    try:
        with transaction.atomic():
            return Conversation.objects.get_or_create(
                participant_one_id=first_id, participant_two_id=second_id
            )
    except IntegrityError:
        # Another request created the pair first
        conversation = Conversation.objects.get(
            participant_one_id=first_id, participant_two_id=second_id
        )
        return conversation, False


class MessageService:
    @staticmethod
    def send_message(sender, recipient_id: int, content: str) -> Message:
        if sender.id == recipient_id:
            raise ValidationFailed("You cannot send a message to yourself")

        recipient = get_visible_user(recipient_id, "Recipient")
        first_id, second_id = Conversation.ordered_pair(sender.id, recipient.id)

        with transaction.atomic():
            conversation, created = get_or_create_conversation(first_id, second_id)
            message = Message.objects.create(
                conversation=conversation, sender=sender, content=content
            )
            conversation.last_message = message
            conversation.last_message_at = message.created_at
            conversation.save(
                update_fields=["last_message", "last_message_at", "updated_at"]
            )

        if created:
            logger.info(f"Started conversation {conversation.id}")

        emit_to_user(
            recipient.id,
            EventTypes.MESSAGE_NEW,
            {
                "conversationId": conversation.id,
                "message": MessageOut.from_model(message).model_dump(mode="json"),
            },
        )
        return message

    @staticmethod
    def get_conversations(user, page, limit) -> Page:
        queryset = (
            Conversation.objects.filter(
                Q(participant_one=user) | Q(participant_two=user)
            )
            .select_related("participant_one", "participant_two", "last_message")
            .annotate(
                unread_count=Count(
                    "messages",
                    filter=Q(messages__is_read=False) & ~Q(messages__sender=user),
                )
            )
            .order_by("-last_message_at", "-id")
        )
        return paginate(queryset, page, limit, CONVERSATIONS_PAGE)

    @staticmethod
    def get_messages(conversation_id: int, user, page, limit) -> Page:
        """
        Newest messages are paged first; each page is returned oldest to
        newest so it renders top-down.
        """
        conversation = get_participant_conversation(conversation_id, user)
        queryset = (
            Message.objects.filter(conversation=conversation)
            .select_related("sender")
            .order_by("-created_at", "-id")
        )
        result = paginate(queryset, page, limit, MESSAGES_PAGE)
        result.items.reverse()
        return result

    @staticmethod
    def mark_messages_as_read(conversation_id: int, user) -> int:
        conversation = get_participant_conversation(conversation_id, user)
        now = timezone.now()
        updated = (
            Message.objects.filter(conversation=conversation, is_read=False)
            .exclude(sender=user)
            .update(is_read=True, read_at=now, updated_at=now)
        )

        if updated:
            emit_to_user(
                conversation.other_participant_id(user),
                EventTypes.MESSAGE_READ,
                {"conversationId": conversation.id, "readBy": user.id},
            )
        return updated

    @staticmethod
    def get_unread_count(user) -> int:
        return (
            Message.objects.filter(
                Q(conversation__participant_one=user)
                | Q(conversation__participant_two=user),
                is_read=False,
            )
            .exclude(sender=user)
            .count()
        )

    @staticmethod
    def delete_conversation(conversation_id: int, user):
        conversation = get_participant_conversation(conversation_id, user)
        with transaction.atomic():
            Message.objects.filter(conversation=conversation).delete()
            conversation.delete()
        logger.info(f"User {user.id} deleted conversation {conversation_id}")
