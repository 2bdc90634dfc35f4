from datetime import datetime
from typing import List, Optional

from ninja import Schema
from pydantic import Field

from socialhub.constants import MESSAGE_MAX_LENGTH
from socialhub.schemas import Envelope, UserPublic


class MessageCreateIn(Schema):
    recipientId: int
    content: str = Field(min_length=1, max_length=MESSAGE_MAX_LENGTH)


class MessageOut(Schema):
    id: int
    conversationId: int
    sender: UserPublic
    content: str
    isRead: bool
    readAt: Optional[datetime] = None
    createdAt: datetime

    @staticmethod
    def from_model(message) -> "MessageOut":
        return MessageOut(
            id=message.id,
            conversationId=message.conversation_id,
            sender=UserPublic.from_model(message.sender),
            content=message.content,
            isRead=message.is_read,
            readAt=message.read_at,
            createdAt=message.created_at,
        )


class LastMessageOut(Schema):
    id: int
    senderId: int
    content: str
    isRead: bool
    createdAt: datetime


class ConversationOut(Schema):
    id: int
    participant: UserPublic
    lastMessage: Optional[LastMessageOut] = None
    lastMessageAt: Optional[datetime] = None
    unreadCount: int = 0

    @staticmethod
    def from_model(conversation, user, unread_count: int = 0) -> "ConversationOut":
        other = (
            conversation.participant_two
            if conversation.participant_one_id == user.id
            else conversation.participant_one
        )
        last = conversation.last_message
        return ConversationOut(
            id=conversation.id,
            participant=UserPublic.from_model(other),
            lastMessage=(
                LastMessageOut(
                    id=last.id,
                    senderId=last.sender_id,
                    content=last.content,
                    isRead=last.is_read,
                    createdAt=last.created_at,
                )
                if last
                else None
            ),
            lastMessageAt=conversation.last_message_at,
            unreadCount=unread_count,
        )


class SentMessageData(Schema):
    message: MessageOut
    conversationId: int


class SentMessageEnvelope(Envelope):
    data: SentMessageData


class ConversationListData(Schema):
    conversations: List[ConversationOut]
    total: int
    page: int
    pages: int


class ConversationListEnvelope(Envelope):
    data: ConversationListData


class MessageListData(Schema):
    messages: List[MessageOut]
    total: int
    page: int
    pages: int


class MessageListEnvelope(Envelope):
    data: MessageListData


class MarkReadData(Schema):
    updated: int


class MarkReadEnvelope(Envelope):
    data: MarkReadData


class UnreadMessagesData(Schema):
    count: int


class UnreadMessagesEnvelope(Envelope):
    data: UnreadMessagesData
