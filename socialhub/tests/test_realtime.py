from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from django.test import SimpleTestCase

from socialhub.realtime import (
    ConnectionRegistry,
    EventTypes,
    build_message,
    emit_to_user,
    invalidation_tags,
    registry,
)
from socialhub.testing import new_channel, receive_push


class ConnectionRegistryTestCase(SimpleTestCase):
    def setUp(self):
        self.registry = ConnectionRegistry()

    def test_register_and_lookup(self):
        self.assertIsNone(self.registry.register(1, "chan-a"))
        self.assertEqual(self.registry.get(1), "chan-a")
        self.assertTrue(self.registry.is_online(1))
        self.assertFalse(self.registry.is_online(2))
        self.assertEqual(len(self.registry), 1)

    def test_new_connection_replaces_old(self):
        self.registry.register(1, "chan-a")
        self.assertEqual(self.registry.register(1, "chan-b"), "chan-a")
        self.assertEqual(self.registry.get(1), "chan-b")
        self.assertEqual(len(self.registry), 1)

    def test_stale_unregister_keeps_newer_connection(self):
        self.registry.register(1, "chan-a")
        self.registry.register(1, "chan-b")

        self.assertFalse(self.registry.unregister(1, "chan-a"))
        self.assertEqual(self.registry.get(1), "chan-b")

        self.assertTrue(self.registry.unregister(1, "chan-b"))
        self.assertIsNone(self.registry.get(1))

    def test_online_user_ids(self):
        self.registry.register(1, "chan-a")
        self.registry.register(2, "chan-b")
        self.assertCountEqual(self.registry.online_user_ids(), [1, 2])
        self.registry.clear()
        self.assertEqual(self.registry.online_user_ids(), [])


class InvalidationTagsTestCase(SimpleTestCase):
    def test_fixed_and_payload_ids(self):
        tags = invalidation_tags(EventTypes.MESSAGE_NEW, {"conversationId": 12})
        self.assertEqual(
            tags,
            [
                {"type": "Conversation", "id": "LIST"},
                {"type": "Conversation", "id": "UNREAD_COUNT"},
                {"type": "Message", "id": 12},
            ],
        )

    def test_missing_payload_key_is_skipped(self):
        self.assertEqual(invalidation_tags(EventTypes.POST_LIKE, {}), [])

    def test_unknown_event(self):
        self.assertEqual(invalidation_tags("custom:event", {"postId": 1}), [])

    def test_build_message_serializes_datetimes(self):
        sent_at = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        message = build_message(EventTypes.USER_ONLINE, {"userId": 4, "at": sent_at})
        self.assertEqual(message["type"], "push.event")
        self.assertEqual(message["data"], {"userId": 4, "at": "2024-05-01T12:30:00+00:00"})
        self.assertEqual(message["invalidates"], [{"type": "User", "id": 4}])


class EmitToUserTestCase(SimpleTestCase):
    def setUp(self):
        registry.clear()

    def tearDown(self):
        registry.clear()

    def test_offline_user_is_skipped(self):
        with patch("socialhub.realtime.get_channel_layer") as get_layer:
            self.assertFalse(emit_to_user(42, EventTypes.POST_LIKE, {"postId": 1}))
            get_layer.assert_not_called()

    def test_delivers_through_channel_layer(self):
        channel = new_channel()
        registry.register(7, channel)

        delivered = emit_to_user(
            7, EventTypes.MESSAGE_READ, {"conversationId": 3, "readBy": 9}
        )
        self.assertTrue(delivered)

        message = receive_push(channel)
        self.assertEqual(message["type"], "push.event")
        self.assertEqual(message["event"], "message:read")
        self.assertEqual(message["data"], {"conversationId": 3, "readBy": 9})
        self.assertIn({"type": "Message", "id": 3}, message["invalidates"])

    def test_layer_failure_is_logged_not_raised(self):
        registry.register(7, "chan-a")
        with patch("socialhub.realtime.get_channel_layer") as get_layer:
            get_layer.return_value.send = AsyncMock(side_effect=RuntimeError("layer down"))
            with self.assertLogs("socialhub.realtime", level="ERROR"):
                delivered = emit_to_user(7, EventTypes.POST_LIKE, {"postId": 1})

        self.assertFalse(delivered)
