import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from ninja.security import HttpBearer
from rest_framework.exceptions import AuthenticationFailed as DRFAuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from socialhub.errors import AuthenticationFailed

logger = logging.getLogger(__name__)


def get_user_from_token(token: str):
    """
    Validate a raw access token and return its active, non-deleted user.
    Shared by the REST auth classes and the WebSocket middleware.
    """
    jwt_authentication = JWTAuthentication()
    try:
        validated_token = jwt_authentication.get_validated_token(token)
        user = jwt_authentication.get_user(validated_token)
    except InvalidToken:
        raise AuthenticationFailed("Your session has expired. Please log in again.")
    except TokenError as e:
        raise AuthenticationFailed(f"Token error: {str(e)}")
    except DRFAuthenticationFailed:
        raise AuthenticationFailed("Authentication failed: Unable to identify user.")

    if user is None or getattr(user, "is_deleted", False):
        raise AuthenticationFailed("Authentication failed: Unable to identify user.")
    return user


class JWTAuth(HttpBearer):
    def authenticate(self, request: HttpRequest, token):
        return get_user_from_token(token)


# Function-based auth for endpoints that also serve anonymous visitors
def OptionalJWTAuth(request: HttpRequest):
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return AnonymousUser()

    token = auth_header.split("Bearer ")[1]
    return get_user_from_token(token)


def current_user(request: HttpRequest):
    """The authenticated user of a request, or None for anonymous visitors."""
    user = getattr(request, "auth", None)
    if user is None or not user.is_authenticated:
        return None
    return user


@database_sync_to_async
def get_websocket_user(token: str):
    try:
        return get_user_from_token(token)
    except AuthenticationFailed as e:
        logger.info(f"Rejected WebSocket token: {e.message}")
        return AnonymousUser()


def token_from_scope(scope) -> str:
    query = parse_qs(scope.get("query_string", b"").decode())
    if query.get("token"):
        return query["token"][0]

    for name, value in scope.get("headers", []):
        if name == b"authorization":
            value = value.decode()
            if value.startswith("Bearer "):
                return value.split("Bearer ")[1]
    return ""


class JWTAuthMiddleware(BaseMiddleware):
    """
    Populates scope["user"] from a JWT access token passed as the ``token``
    query parameter or a Bearer Authorization header.
    """

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = token_from_scope(scope)
        scope["user"] = await get_websocket_user(token) if token else AnonymousUser()
        return await super().__call__(scope, receive, send)
