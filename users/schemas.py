"""
This module defines the input and output schemas for authentication, user
profiles and follow relations.
"""

import re
from datetime import datetime
from typing import List, Optional

from ninja import Schema
from pydantic import Field, field_validator

from socialhub.constants import (
    BIO_MAX_LENGTH,
    FULL_NAME_MAX_LENGTH,
    FULL_NAME_MIN_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from socialhub.schemas import Envelope, UserPublic

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

"""
Authentication Schemas
"""


class RegisterIn(Schema):
    """
    Input schema for creating an account. The password needs at least one
    uppercase letter, one lowercase letter and one digit.
    """

    username: str = Field(
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        pattern=USERNAME_PATTERN,
    )
    email: str = Field(max_length=254, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    fullName: str = Field(
        default="", max_length=FULL_NAME_MAX_LENGTH
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        if not (
            re.search(r"[a-z]", value)
            and re.search(r"[A-Z]", value)
            and re.search(r"\d", value)
        ):
            raise ValueError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return value

    @field_validator("fullName")
    @classmethod
    def check_full_name(cls, value: str) -> str:
        value = value.strip()
        if value and len(value) < FULL_NAME_MIN_LENGTH:
            raise ValueError(
                f"Full name must be at least {FULL_NAME_MIN_LENGTH} characters"
            )
        return value


class LoginIn(Schema):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RefreshIn(Schema):
    refreshToken: str


class TokensOut(Schema):
    accessToken: str
    refreshToken: str


"""
User Schemas
"""


class UserOut(Schema):
    """The authenticated user's own account, including the email."""

    id: int
    username: str
    email: str
    fullName: str
    bio: str
    avatar: str
    followersCount: int
    followingCount: int
    createdAt: datetime

    @staticmethod
    def from_model(user) -> "UserOut":
        return UserOut(
            id=user.id,
            username=user.username,
            email=user.email,
            fullName=user.full_name,
            bio=user.bio,
            avatar=user.avatar,
            followersCount=user.followers_count,
            followingCount=user.following_count,
            createdAt=user.created_at,
        )


class UserProfileOut(Schema):
    id: int
    username: str
    fullName: str
    bio: str
    avatar: str
    followersCount: int
    followingCount: int
    postsCount: int
    isFollowing: bool = False
    createdAt: datetime

    @staticmethod
    def from_model(user, posts_count: int, is_following: bool) -> "UserProfileOut":
        return UserProfileOut(
            id=user.id,
            username=user.username,
            fullName=user.full_name,
            bio=user.bio,
            avatar=user.avatar,
            followersCount=user.followers_count,
            followingCount=user.following_count,
            postsCount=posts_count,
            isFollowing=is_following,
            createdAt=user.created_at,
        )


class ProfileUpdateIn(Schema):
    fullName: Optional[str] = Field(
        default=None, min_length=FULL_NAME_MIN_LENGTH, max_length=FULL_NAME_MAX_LENGTH
    )
    bio: Optional[str] = Field(default=None, max_length=BIO_MAX_LENGTH)
    username: Optional[str] = Field(
        default=None,
        min_length=USERNAME_MIN_LENGTH,
        max_length=USERNAME_MAX_LENGTH,
        pattern=USERNAME_PATTERN,
    )


class FollowUserOut(UserPublic):
    bio: str
    followedAt: datetime


"""
Envelopes
"""


class AuthData(Schema):
    user: UserOut
    accessToken: str
    refreshToken: str


class AuthEnvelope(Envelope):
    data: AuthData


class TokensEnvelope(Envelope):
    data: TokensOut


class UserData(Schema):
    user: UserOut


class UserEnvelope(Envelope):
    data: UserData


class ProfileData(Schema):
    user: UserProfileOut


class ProfileEnvelope(Envelope):
    data: ProfileData


class UserSearchData(Schema):
    users: List[UserPublic]


class UserSearchEnvelope(Envelope):
    data: UserSearchData


class FollowStatusData(Schema):
    isFollowing: bool
    followersCount: int


class FollowStatusEnvelope(Envelope):
    data: FollowStatusData


class FollowersData(Schema):
    followers: List[FollowUserOut]
    total: int
    page: int
    pages: int


class FollowersEnvelope(Envelope):
    data: FollowersData


class FollowingData(Schema):
    following: List[FollowUserOut]
    total: int
    page: int
    pages: int


class FollowingEnvelope(Envelope):
    data: FollowingData
