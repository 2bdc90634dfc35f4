from django.test import TestCase
from ninja.testing import TestClient

from socialhub.api import api
from socialhub.testing import DEFAULT_PASSWORD, auth_headers, create_user
from users.models import User


class RegisterAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)
        self.payload = {
            "username": "new_user",
            "email": "NewUser@Example.com",
            "password": "Secure123",
            "fullName": "New User",
        }

    def test_successful_register(self):
        response = self.client.post("/auth/register", json=self.payload)
        self.assertEqual(response.status_code, 201)

        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["statusCode"], 201)
        self.assertEqual(body["message"], "User registered successfully")
        self.assertEqual(body["data"]["user"]["username"], "new_user")
        self.assertEqual(body["data"]["user"]["email"], "newuser@example.com")
        self.assertIn("accessToken", body["data"])
        self.assertIn("refreshToken", body["data"])

        user = User.objects.get(username="new_user")
        self.assertTrue(user.check_password("Secure123"))
        self.assertEqual(user.full_name, "New User")

    def test_weak_password_is_rejected(self):
        self.payload["password"] = "alllowercase1"
        response = self.client.post("/auth/register", json=self.payload)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertIn("password", response.json()["message"])

    def test_invalid_username_is_rejected(self):
        self.payload["username"] = "no spaces!"
        response = self.client.post("/auth/register", json=self.payload)
        self.assertEqual(response.status_code, 400)

    def test_duplicate_email_conflicts(self):
        create_user(username="existing", email="newuser@example.com")
        response = self.client.post("/auth/register", json=self.payload)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "Email is already in use")

    def test_duplicate_username_conflicts(self):
        create_user(username="New_User")
        response = self.client.post("/auth/register", json=self.payload)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["message"], "Username is already taken")


class LoginAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)
        self.user = create_user(username="alice", email="alice@example.com")

    def test_login_with_email(self):
        response = self.client.post(
            "/auth/login",
            json={"email": "Alice@example.com", "password": DEFAULT_PASSWORD},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["user"]["id"], self.user.id)

    def test_wrong_password(self):
        response = self.client.post(
            "/auth/login", json={"email": "alice@example.com", "password": "Wrong123"}
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Invalid email or password")

    def test_deleted_account_cannot_login(self):
        self.user.soft_delete()
        response = self.client.post(
            "/auth/login",
            json={"email": "alice@example.com", "password": DEFAULT_PASSWORD},
        )
        self.assertEqual(response.status_code, 401)


class TokenAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)
        self.user = create_user(email="bob@example.com")
        response = self.client.post(
            "/auth/login", json={"email": "bob@example.com", "password": DEFAULT_PASSWORD}
        )
        self.tokens = response.json()["data"]

    def test_me_requires_token(self):
        response = self.client.get("/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json()["message"],
            "You need to be authenticated to perform this action.",
        )

    def test_me_with_token(self):
        response = self.client.get(
            "/auth/me",
            headers={"Authorization": f"Bearer {self.tokens['accessToken']}"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["user"]["email"], "bob@example.com")

    def test_invalid_token(self):
        response = self.client.get(
            "/auth/me", headers={"Authorization": "Bearer not-a-token"}
        )
        self.assertEqual(response.status_code, 401)

    def test_refresh_rotates_token(self):
        response = self.client.post(
            "/auth/refresh", json={"refreshToken": self.tokens["refreshToken"]}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("accessToken", response.json()["data"])

        # The rotated token has been blacklisted
        response = self.client.post(
            "/auth/refresh", json={"refreshToken": self.tokens["refreshToken"]}
        )
        self.assertEqual(response.status_code, 401)

    def test_logout_blacklists_refresh_token(self):
        response = self.client.post(
            "/auth/logout",
            json={"refreshToken": self.tokens["refreshToken"]},
            headers=auth_headers(self.user),
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.post(
            "/auth/refresh", json={"refreshToken": self.tokens["refreshToken"]}
        )
        self.assertEqual(response.status_code, 401)

    def test_deleted_user_token_stops_working(self):
        headers = auth_headers(self.user)
        self.user.soft_delete()
        response = self.client.get("/auth/me", headers=headers)
        self.assertEqual(response.status_code, 401)
