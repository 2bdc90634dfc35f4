"""
Direct message endpoints. Only the two participants of a conversation can
read or change it.
"""

import logging

from django.http import HttpRequest
from ninja import Router
from ninja.responses import codes_4xx

from chat.schemas import (
    ConversationListEnvelope,
    ConversationOut,
    MarkReadEnvelope,
    MessageCreateIn,
    MessageListEnvelope,
    MessageOut,
    SentMessageEnvelope,
    UnreadMessagesEnvelope,
)
from chat.services import MessageService
from socialhub.schemas import EmptyEnvelope, ErrorOut, respond
from users.auth import JWTAuth

router = Router(tags=["Messages"])

logger = logging.getLogger(__name__)


@router.post("/", response={201: SentMessageEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def send_message(request: HttpRequest, payload: MessageCreateIn):
    message = MessageService.send_message(
        request.auth, payload.recipientId, payload.content
    )
    return respond(
        201,
        "Message sent successfully",
        {
            "message": MessageOut.from_model(message),
            "conversationId": message.conversation_id,
        },
    )


@router.get(
    "/conversations",
    response={200: ConversationListEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def get_conversations(request: HttpRequest, page: int = 1, limit: int = 20):
    user = request.auth
    result = MessageService.get_conversations(user, page, limit)
    conversations = [
        ConversationOut.from_model(c, user, c.unread_count) for c in result.items
    ]
    return respond(
        200,
        "Conversations retrieved successfully",
        result.as_dict("conversations", conversations),
    )


@router.get(
    "/unread-count",
    response={200: UnreadMessagesEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def get_unread_count(request: HttpRequest):
    count = MessageService.get_unread_count(request.auth)
    return respond(200, "Unread count retrieved successfully", {"count": count})


@router.get(
    "/conversations/{conversation_id}",
    response={200: MessageListEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def get_messages(
    request: HttpRequest, conversation_id: int, page: int = 1, limit: int = 50
):
    result = MessageService.get_messages(conversation_id, request.auth, page, limit)
    messages = [MessageOut.from_model(m) for m in result.items]
    return respond(
        200, "Messages retrieved successfully", result.as_dict("messages", messages)
    )


@router.put(
    "/conversations/{conversation_id}/read",
    response={200: MarkReadEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def mark_as_read(request: HttpRequest, conversation_id: int):
    updated = MessageService.mark_messages_as_read(conversation_id, request.auth)
    return respond(200, "Messages marked as read", {"updated": updated})


@router.delete(
    "/conversations/{conversation_id}",
    response={200: EmptyEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def delete_conversation(request: HttpRequest, conversation_id: int):
    MessageService.delete_conversation(conversation_id, request.auth)
    return respond(200, "Conversation deleted successfully")
