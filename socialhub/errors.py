"""
Typed API errors.

Every error raised from a service or a router is one of these; the
exception handlers in socialhub.api turn them into the error envelope.
"""

from ninja.errors import HttpError


class ApiError(HttpError):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message=None):
        super().__init__(self.status_code, message or self.default_message)


class ValidationFailed(ApiError):
    status_code = 400
    default_message = "Validation failed"


class AuthenticationFailed(ApiError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(ApiError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"
