"""
Fixtures shared by the test suites of every app
"""

import asyncio
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, patch

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from faker import Faker
from rest_framework_simplejwt.tokens import RefreshToken

from posts.models import Post
from users.models import User

fake = Faker()

DEFAULT_PASSWORD = "Password123"


def create_user(**extra_fields) -> User:
    username = extra_fields.pop("username", None) or fake.unique.user_name()[:30]
    email = extra_fields.pop("email", None) or fake.unique.email()
    password = extra_fields.pop("password", DEFAULT_PASSWORD)
    extra_fields.setdefault("full_name", fake.name()[:100])
    return User.objects.create_user(
        username=username, email=email, password=password, **extra_fields
    )


def create_post(author, **fields) -> Post:
    fields.setdefault("images", [fake.image_url()])
    fields.setdefault("caption", fake.sentence())
    return Post.objects.create(author=author, **fields)


def access_token(user) -> str:
    return str(RefreshToken.for_user(user).access_token)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {access_token(user)}"}


def new_channel() -> str:
    """Allocate a channel on the configured channel layer."""
    return async_to_sync(get_channel_layer().new_channel)()


def receive_push(channel: str, timeout: float = 1):
    """Read the next message sent to a channel, failing after ``timeout``."""

    async def receive():
        return await asyncio.wait_for(get_channel_layer().receive(channel), timeout)

    return async_to_sync(receive)()


@contextmanager
def capture_pushes():
    """
    Replace the channel layer used by socialhub.realtime with a mock and
    yield a PushLog of everything sent through it.
    """
    layer = MagicMock()
    layer.send = AsyncMock()
    pushes = PushLog(layer.send)
    with patch("socialhub.realtime.get_channel_layer", return_value=layer):
        yield pushes


class PushLog:
    def __init__(self, send_mock):
        self.send_mock = send_mock

    def all(self):
        return [
            (channel, message["event"], message["data"], message["invalidates"])
            for (channel, message), _ in self.send_mock.call_args_list
        ]

    def events(self, channel=None):
        return [
            event for sent_to, event, _, _ in self.all() if channel in (None, sent_to)
        ]

    def data(self, event):
        return [data for _, sent, data, _ in self.all() if sent == event]
