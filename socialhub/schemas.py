"""
Envelopes and schemas shared by every router
"""

from typing import Optional

from ninja import Schema


class ErrorOut(Schema):
    success: bool = False
    statusCode: int
    message: str
    stack: Optional[str] = None


class Envelope(Schema):
    success: bool = True
    statusCode: int
    message: str


class EmptyEnvelope(Envelope):
    data: None = None


class UserPublic(Schema):
    id: int
    username: str
    fullName: str
    avatar: str

    @staticmethod
    def from_model(user) -> "UserPublic":
        return UserPublic(
            id=user.id,
            username=user.username,
            fullName=user.full_name,
            avatar=user.avatar,
        )


def respond(status: int, message: str, data=None):
    """Build a (status, body) pair in the success envelope."""
    return status, {
        "success": True,
        "statusCode": status,
        "message": message,
        "data": data,
    }
