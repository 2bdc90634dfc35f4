import logging
import traceback

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.http import Http404, HttpRequest
from django.utils import timezone
from django_ratelimit.exceptions import Ratelimited
from ninja import NinjaAPI
from ninja.errors import AuthenticationError, HttpError, ValidationError

from chat.api import router as messages_router
from notifications.api import router as notifications_router
from posts.api import router as posts_router
from posts.api_comments import router as comments_router
from posts.api_explore import router as explore_router
from posts.api_likes import router as likes_router
from posts.api_search import router as search_router
from socialhub.realtime_api import router as realtime_router
from socialhub.uploads_api import router as uploads_router
from users.api import router as users_router
from users.api_auth import router as auth_router
from users.api_follows import router as follows_router

logger = logging.getLogger(__name__)

api = NinjaAPI(docs_url="docs/", title="SocialHub API", urls_namespace="api_v1")

"""
Global Exception Handlers (Error Handlers)
"""


def request_body(request: HttpRequest) -> str:
    try:
        body = request.body
    except Exception:
        return ""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return body[:1000]


def error_response(request: HttpRequest, status: int, message: str, exc=None):
    content = {"success": False, "statusCode": status, "message": message}
    if settings.DEBUG and exc is not None:
        content["stack"] = "".join(traceback.format_exception(exc))
    return api.create_response(request, content, status=status)


def format_validation_errors(errors) -> str:
    messages = []
    for error in errors:
        location = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "payload", "query", "path")
        ]
        field = ".".join(location)
        message = str(error.get("msg"))
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages) or "Validation failed"


@api.exception_handler(AuthenticationError)
def custom_authentication_error_handler(request, exc):
    return error_response(
        request, 401, "You need to be authenticated to perform this action.", exc
    )


@api.exception_handler(HttpError)
def custom_http_error_handler(request, exc):
    logger.info(f"{request.method} {request.path} -> {exc.status_code}: {exc.message}")
    return error_response(request, exc.status_code, exc.message, exc)


@api.exception_handler(ValidationError)
def validation_error_handler(request: HttpRequest, exc: ValidationError):
    return error_response(request, 400, format_validation_errors(exc.errors), exc)


@api.exception_handler(Ratelimited)
def ratelimited_handler(request, exc):
    logger.warning(f"Rate limit hit: {request.method} {request.path}")
    return error_response(
        request, 429, "Too many requests. Please try again later.", exc
    )


@api.exception_handler(Http404)
def not_found_handler(request, exc):
    return error_response(request, 404, "Not Found", exc)


@api.exception_handler(ObjectDoesNotExist)
def object_not_found_handler(request, exc):
    # Return a 404 response if the object is not found
    return error_response(request, 404, exc.args[0] if exc.args else "Not Found", exc)


@api.exception_handler(Exception)
def generic_error_handler(request: HttpRequest, exc: Exception):
    logger.error(
        f"Unhandled error on {request.method} {request.path} "
        f"body={request_body(request)!r}: {exc}",
        exc_info=exc,
    )
    if settings.DEBUG:
        error_message = str(exc)
    else:
        error_message = "Internal Server Error"

    return error_response(request, 500, error_message, exc)


"""
Health Check
"""


@api.get("/health", tags=["Health"])
def health(request):
    return {
        "success": True,
        "statusCode": 200,
        "message": "Server is running",
        "data": {"timestamp": timezone.now().isoformat()},
    }


"""
Registering the routers
"""

api.add_router("/auth", auth_router)
api.add_router("/users", users_router)
api.add_router("/follows", follows_router)
api.add_router("/posts", posts_router)
api.add_router("/uploads", uploads_router)
api.add_router("/likes", likes_router)
api.add_router("/comments", comments_router)
api.add_router("/messages", messages_router)
api.add_router("/notifications", notifications_router)
api.add_router("/search", search_router)
api.add_router("/explore", explore_router)
api.add_router("/realtime", realtime_router)
