"""
Account and follow-graph operations. Routers stay thin and call into here.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from notifications.models import Notification
from notifications.services import NotificationService
from socialhub.constants import FOLLOWS_PAGE
from socialhub.errors import (
    AuthenticationFailed,
    Conflict,
    Forbidden,
    NotFound,
    ValidationFailed,
)
from socialhub.pagination import Page, paginate
from users.models import Follow, User

logger = logging.getLogger(__name__)


def get_visible_user(user_id: int, resource: str = "User") -> User:
    user = User.objects.visible().filter(pk=user_id).first()
    if user is None:
        raise NotFound(resource)
    return user


def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "accessToken": str(refresh.access_token),
        "refreshToken": str(refresh),
    }


class UserService:
    @staticmethod
    def register(username: str, email: str, password: str, full_name: str = "") -> User:
        if User.objects.filter(email=email).exists():
            raise Conflict("Email is already in use")
        if User.objects.filter(username__iexact=username).exists():
            raise Conflict("Username is already taken")

        try:
            user = User.objects.create_user(
                username=username,
                email=email,
                password=password,
                full_name=full_name,
            )
        except IntegrityError:
            raise Conflict("User with this email or username already exists")

        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    @staticmethod
    def login(email: str, password: str) -> User:
        user = User.objects.visible().filter(email__iexact=email.strip()).first()
        if user is None or not user.is_active or not user.check_password(password):
            raise AuthenticationFailed("Invalid email or password")

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        return user

    @staticmethod
    def refresh(refresh_token: str) -> dict:
        """Rotate a refresh token: the old one is blacklisted."""
        try:
            refresh = RefreshToken(refresh_token)
            user_id = refresh["user_id"]
        except (TokenError, KeyError):
            raise AuthenticationFailed("Invalid or expired refresh token")

        user = User.objects.visible().filter(pk=user_id, is_active=True).first()
        if user is None:
            raise AuthenticationFailed("Invalid or expired refresh token")

        refresh.blacklist()
        return issue_tokens(user)

    @staticmethod
    def logout(refresh_token: str):
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError:
            raise AuthenticationFailed("Invalid or expired refresh token")

    @staticmethod
    def update_profile(user: User, full_name=None, bio=None, username=None) -> User:
        if username is not None and username != user.username:
            taken = (
                User.objects.filter(username__iexact=username)
                .exclude(pk=user.pk)
                .exists()
            )
            if taken:
                raise Conflict("Username is already taken")
            user.username = username
        if full_name is not None:
            user.full_name = full_name
        if bio is not None:
            user.bio = bio
        user.save()
        return user

    @staticmethod
    def search_queryset(query: str):
        query = query.strip()
        if not query:
            raise ValidationFailed("Search query is required")
        return (
            User.objects.visible()
            .filter(Q(username__icontains=query) | Q(full_name__icontains=query))
            .order_by("-followers_count", "username")
        )

    @staticmethod
    def search(query: str, limit: int):
        return list(UserService.search_queryset(query)[:limit])

    @staticmethod
    def delete_account(user: User):
        """
        Soft-delete the account and drop its follow edges so the counters of
        the users on the other side stay correct.
        """
        with transaction.atomic():
            following_ids = list(
                Follow.objects.filter(follower=user).values_list("following_id", flat=True)
            )
            follower_ids = list(
                Follow.objects.filter(following=user).values_list("follower_id", flat=True)
            )
            Follow.objects.filter(Q(follower=user) | Q(following=user)).delete()
            User.objects.filter(pk__in=following_ids).update(
                followers_count=F("followers_count") - 1
            )
            User.objects.filter(pk__in=follower_ids).update(
                following_count=F("following_count") - 1
            )
            user.followers_count = 0
            user.following_count = 0
            user.soft_delete()

        logger.info(f"Soft-deleted user {user.id}")


class FollowService:
    @staticmethod
    def follow_user(follower: User, following_id: int) -> Follow:
        if follower.id == following_id:
            raise Forbidden("You cannot follow yourself")

        target = get_visible_user(following_id)
        if Follow.objects.filter(follower=follower, following=target).exists():
            raise Conflict("You are already following this user")

        try:
            with transaction.atomic():
                follow = Follow.objects.create(follower=follower, following=target)
                User.objects.filter(pk=follower.pk).update(
                    following_count=F("following_count") + 1
                )
                User.objects.filter(pk=target.pk).update(
                    followers_count=F("followers_count") + 1
                )
        except IntegrityError:
            raise Conflict("You are already following this user")

        NotificationService.create_notification(
            recipient=target,
            sender=follower,
            type=Notification.NotificationType.FOLLOW,
        )
        return follow

    @staticmethod
    def unfollow_user(follower: User, following_id: int):
        if follower.id == following_id:
            raise Forbidden("You cannot unfollow yourself")

        target = get_visible_user(following_id)
        with transaction.atomic():
            deleted, _ = Follow.objects.filter(
                follower=follower, following=target
            ).delete()
            if not deleted:
                raise NotFound("Follow relationship")
            User.objects.filter(pk=follower.pk).update(
                following_count=F("following_count") - 1
            )
            User.objects.filter(pk=target.pk).update(
                followers_count=F("followers_count") - 1
            )

        NotificationService.delete_notification_by_action(
            recipient=target,
            sender=follower,
            type=Notification.NotificationType.FOLLOW,
        )

    @staticmethod
    def get_followers(user_id: int, page, limit) -> Page:
        user = get_visible_user(user_id)
        queryset = (
            Follow.objects.filter(following=user, follower__is_deleted=False)
            .select_related("follower")
            .order_by("-created_at")
        )
        return paginate(queryset, page, limit, FOLLOWS_PAGE)

    @staticmethod
    def get_following(user_id: int, page, limit) -> Page:
        user = get_visible_user(user_id)
        queryset = (
            Follow.objects.filter(follower=user, following__is_deleted=False)
            .select_related("following")
            .order_by("-created_at")
        )
        return paginate(queryset, page, limit, FOLLOWS_PAGE)

    @staticmethod
    def is_following(follower, following_id: int) -> bool:
        if follower is None:
            return False
        return Follow.objects.filter(
            follower=follower, following_id=following_id
        ).exists()
