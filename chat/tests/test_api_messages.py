from unittest.mock import patch

from django.db import IntegrityError
from django.test import TestCase
from ninja.testing import TestClient

from chat.models import Conversation, Message
from socialhub.api import api
from socialhub.realtime import registry
from socialhub.testing import auth_headers, capture_pushes, create_user


class MessageAPITestCase(TestCase):
    def setUp(self):
        registry.clear()
        self.client = TestClient(api)
        self.alice = create_user(username="alice")
        self.bob = create_user(username="bob")
        self.mallory = create_user(username="mallory")

    def tearDown(self):
        registry.clear()

    def send(self, sender, recipient, content="Hey"):
        return self.client.post(
            "/messages/",
            json={"recipientId": recipient.id, "content": content},
            headers=auth_headers(sender),
        )

    def test_conversation_is_reused_in_both_directions(self):
        first = self.send(self.alice, self.bob).json()["data"]
        second = self.send(self.bob, self.alice, "Hi back").json()["data"]

        self.assertEqual(first["conversationId"], second["conversationId"])
        self.assertEqual(Conversation.objects.count(), 1)

        conversation = Conversation.objects.get()
        self.assertEqual(conversation.last_message.content, "Hi back")

    def test_concurrent_conversation_creation_reuses_existing(self):
        first_id, second_id = Conversation.ordered_pair(self.alice.id, self.bob.id)
        existing = Conversation.objects.create(
            participant_one_id=first_id, participant_two_id=second_id
        )

        # The lookup missed and the insert lost the unique race
        with patch.object(
            Conversation.objects, "get_or_create", side_effect=IntegrityError("duplicate")
        ):
            response = self.send(self.alice, self.bob, "Racing")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["conversationId"], existing.id)
        self.assertEqual(Conversation.objects.count(), 1)
        self.assertEqual(Message.objects.get().conversation_id, existing.id)

    def test_send_pushes_to_recipient(self):
        registry.register(self.bob.id, "bob-channel")
        with capture_pushes() as pushes:
            response = self.send(self.alice, self.bob, "Ping")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(pushes.events("bob-channel"), ["message:new"])

        payload = pushes.data("message:new")[0]
        self.assertEqual(payload["conversationId"], response.json()["data"]["conversationId"])
        self.assertEqual(payload["message"]["content"], "Ping")
        self.assertEqual(payload["message"]["sender"]["id"], self.alice.id)

    def test_message_to_self_rejected(self):
        response = self.send(self.alice, self.alice)
        self.assertEqual(response.status_code, 400)

    def test_message_to_unknown_user(self):
        response = self.client.post(
            "/messages/",
            json={"recipientId": 999999, "content": "Hello?"},
            headers=auth_headers(self.alice),
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Recipient not found")

    def test_message_too_long(self):
        response = self.send(self.alice, self.bob, "x" * 1001)
        self.assertEqual(response.status_code, 400)

    def test_non_participant_is_forbidden(self):
        conversation_id = self.send(self.alice, self.bob).json()["data"]["conversationId"]

        response = self.client.get(
            f"/messages/conversations/{conversation_id}", headers=auth_headers(self.mallory)
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(
            f"/messages/conversations/{conversation_id}", headers=auth_headers(self.mallory)
        )
        self.assertEqual(response.status_code, 403)

    def test_unknown_conversation(self):
        response = self.client.get(
            "/messages/conversations/999999", headers=auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 404)

    def test_messages_page_reads_top_down(self):
        for content in ["one", "two", "three"]:
            response = self.send(self.alice, self.bob, content)
        conversation_id = response.json()["data"]["conversationId"]

        response = self.client.get(
            f"/messages/conversations/{conversation_id}?limit=2",
            headers=auth_headers(self.bob),
        )
        data = response.json()["data"]
        self.assertEqual(data["total"], 3)
        self.assertEqual([m["content"] for m in data["messages"]], ["two", "three"])

    def test_unread_count_and_mark_as_read(self):
        self.send(self.alice, self.bob, "one")
        response = self.send(self.alice, self.bob, "two")
        conversation_id = response.json()["data"]["conversationId"]
        self.send(self.bob, self.alice, "reply")

        response = self.client.get("/messages/unread-count", headers=auth_headers(self.bob))
        self.assertEqual(response.json()["data"]["count"], 2)

        response = self.client.get("/messages/conversations", headers=auth_headers(self.bob))
        conversation = response.json()["data"]["conversations"][0]
        self.assertEqual(conversation["unreadCount"], 2)
        self.assertEqual(conversation["participant"]["username"], "alice")
        self.assertEqual(conversation["lastMessage"]["content"], "reply")

        registry.register(self.alice.id, "alice-channel")
        with capture_pushes() as pushes:
            response = self.client.put(
                f"/messages/conversations/{conversation_id}/read",
                headers=auth_headers(self.bob),
            )
        self.assertEqual(response.json()["data"]["updated"], 2)
        self.assertEqual(
            pushes.data("message:read"),
            [{"conversationId": conversation_id, "readBy": self.bob.id}],
        )

        self.assertFalse(
            Message.objects.filter(sender=self.alice, is_read=False).exists()
        )
        self.assertTrue(Message.objects.filter(sender=self.bob, is_read=False).exists())

        response = self.client.get("/messages/unread-count", headers=auth_headers(self.bob))
        self.assertEqual(response.json()["data"]["count"], 0)

    def test_mark_as_read_with_nothing_unread_is_silent(self):
        conversation_id = self.send(self.alice, self.bob).json()["data"]["conversationId"]

        registry.register(self.bob.id, "bob-channel")
        with capture_pushes() as pushes:
            response = self.client.put(
                f"/messages/conversations/{conversation_id}/read",
                headers=auth_headers(self.alice),
            )
        self.assertEqual(response.json()["data"]["updated"], 0)
        self.assertEqual(pushes.all(), [])

    def test_delete_conversation(self):
        conversation_id = self.send(self.alice, self.bob).json()["data"]["conversationId"]

        response = self.client.delete(
            f"/messages/conversations/{conversation_id}", headers=auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Conversation.objects.exists())
        self.assertFalse(Message.objects.exists())

    def test_conversations_newest_first(self):
        self.send(self.alice, self.bob)
        self.send(self.alice, self.mallory)

        response = self.client.get("/messages/conversations", headers=auth_headers(self.alice))
        participants = [
            c["participant"]["username"] for c in response.json()["data"]["conversations"]
        ]
        self.assertEqual(participants, ["mallory", "bob"])
