from unittest.mock import patch

from django.test import TestCase, override_settings
from ninja.testing import TestClient

from socialhub.api import api
from socialhub.realtime import registry
from socialhub.testing import auth_headers, create_user
from users.services import FollowService


class HealthAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertIn("timestamp", response.json()["data"])


class ErrorEnvelopeTestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)

    def test_not_found_shape(self):
        response = self.client.get("/posts/999999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.json(),
            {"success": False, "statusCode": 404, "message": "Post not found"},
        )

    @override_settings(DEBUG=True)
    def test_stack_included_in_debug(self):
        response = self.client.get("/posts/999999")
        self.assertIn("stack", response.json())

    def test_validation_error_names_field(self):
        response = self.client.post(
            "/auth/login", json={"email": "a@example.com"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.json()["message"])

    @patch("posts.api.PostService.get_feed", side_effect=RuntimeError("boom"))
    def test_unexpected_error_is_hidden(self, get_feed):
        with self.assertLogs("socialhub.api", level="ERROR"):
            response = self.client.get("/posts/feed")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["message"], "Internal Server Error")


class RealtimeStatusAPITestCase(TestCase):
    def setUp(self):
        registry.clear()
        self.client = TestClient(api)
        self.user = create_user()
        self.friend = create_user()
        self.stranger = create_user()
        FollowService.follow_user(self.user, self.friend.id)

    def tearDown(self):
        registry.clear()

    def test_status_lists_online_following(self):
        registry.register(self.friend.id, "friend-channel")
        registry.register(self.stranger.id, "stranger-channel")

        response = self.client.get("/realtime/status", headers=auth_headers(self.user))
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertFalse(data["connected"])
        self.assertEqual(data["websocketPath"], "/ws/events/")
        self.assertEqual(data["onlineFollowing"], [self.friend.id])
