"""
Profile endpoints: read, update, avatar upload, search and account deletion.
"""

import logging

from django.http import HttpRequest
from django_ratelimit.decorators import ratelimit
from ninja import File, Router
from ninja.files import UploadedFile
from ninja.responses import codes_4xx

from posts.models import Post
from socialhub.constants import SEARCH_USERS_LIMIT
from socialhub.pagination import clamp
from socialhub.schemas import EmptyEnvelope, ErrorOut, UserPublic, respond
from socialhub.uploads import delete_image, store_image
from users.auth import JWTAuth, OptionalJWTAuth, current_user
from users.schemas import (
    ProfileEnvelope,
    ProfileUpdateIn,
    UserEnvelope,
    UserOut,
    UserProfileOut,
    UserSearchEnvelope,
)
from users.services import FollowService, UserService, get_visible_user

router = Router(tags=["Users"])

logger = logging.getLogger(__name__)


@router.get("/me", response={200: UserEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def get_me(request: HttpRequest):
    return respond(
        200, "User retrieved successfully", {"user": UserOut.from_model(request.auth)}
    )


@router.get("/search", response={200: UserSearchEnvelope, codes_4xx: ErrorOut})
@ratelimit(key="ip", rate="30/m", block=True)
def search_users(request: HttpRequest, q: str = "", limit: int = 10):
    _, limit = clamp(1, limit, SEARCH_USERS_LIMIT[1], SEARCH_USERS_LIMIT[0])
    users = UserService.search(q, limit)
    return respond(
        200,
        "Users retrieved successfully",
        {"users": [UserPublic.from_model(user) for user in users]},
    )


@router.put(
    "/profile", response={200: UserEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def update_profile(request: HttpRequest, payload: ProfileUpdateIn):
    user = UserService.update_profile(
        request.auth,
        full_name=payload.fullName,
        bio=payload.bio,
        username=payload.username,
    )
    return respond(200, "Profile updated successfully", {"user": UserOut.from_model(user)})


@router.post(
    "/avatar", response={200: UserEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def upload_avatar(request: HttpRequest, file: UploadedFile = File(...)):
    user = request.auth
    previous = user.avatar

    user.avatar = store_image(file, folder="avatars")
    user.save(update_fields=["avatar", "updated_at"])
    if previous:
        delete_image(previous)

    return respond(200, "Avatar updated successfully", {"user": UserOut.from_model(user)})


@router.delete("/me", response={200: EmptyEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def delete_account(request: HttpRequest):
    UserService.delete_account(request.auth)
    return respond(200, "Account deleted successfully")


@router.get(
    "/{user_id}",
    response={200: ProfileEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
def get_user_profile(request: HttpRequest, user_id: int):
    user = get_visible_user(user_id)
    viewer = current_user(request)
    posts_count = Post.objects.visible().filter(author=user).count()
    is_following = FollowService.is_following(viewer, user.id)
    return respond(
        200,
        "User retrieved successfully",
        {"user": UserProfileOut.from_model(user, posts_count, is_following)},
    )
