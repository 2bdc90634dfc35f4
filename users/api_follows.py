import logging

from django.http import HttpRequest
from ninja import Router
from ninja.responses import codes_4xx

from socialhub.schemas import ErrorOut, respond
from users.auth import JWTAuth
from users.models import User
from users.schemas import (
    FollowersEnvelope,
    FollowingEnvelope,
    FollowStatusEnvelope,
    FollowUserOut,
)
from users.services import FollowService

router = Router(tags=["Follows"])

logger = logging.getLogger(__name__)


def follow_user_out(user, followed_at) -> FollowUserOut:
    return FollowUserOut(
        id=user.id,
        username=user.username,
        fullName=user.full_name,
        avatar=user.avatar,
        bio=user.bio,
        followedAt=followed_at,
    )


@router.post(
    "/{user_id}",
    response={201: FollowStatusEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def follow_user(request: HttpRequest, user_id: int):
    FollowService.follow_user(request.auth, user_id)
    followers_count = User.objects.values_list("followers_count", flat=True).get(
        pk=user_id
    )
    return respond(
        201,
        "User followed successfully",
        {"isFollowing": True, "followersCount": followers_count},
    )


@router.delete(
    "/{user_id}",
    response={200: FollowStatusEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def unfollow_user(request: HttpRequest, user_id: int):
    FollowService.unfollow_user(request.auth, user_id)
    followers_count = User.objects.values_list("followers_count", flat=True).get(
        pk=user_id
    )
    return respond(
        200,
        "User unfollowed successfully",
        {"isFollowing": False, "followersCount": followers_count},
    )


@router.get("/{user_id}/followers", response={200: FollowersEnvelope, codes_4xx: ErrorOut})
def get_followers(request: HttpRequest, user_id: int, page: int = 1, limit: int = 20):
    result = FollowService.get_followers(user_id, page, limit)
    followers = [follow_user_out(f.follower, f.created_at) for f in result.items]
    return respond(
        200, "Followers retrieved successfully", result.as_dict("followers", followers)
    )


@router.get("/{user_id}/following", response={200: FollowingEnvelope, codes_4xx: ErrorOut})
def get_following(request: HttpRequest, user_id: int, page: int = 1, limit: int = 20):
    result = FollowService.get_following(user_id, page, limit)
    following = [follow_user_out(f.following, f.created_at) for f in result.items]
    return respond(
        200, "Following retrieved successfully", result.as_dict("following", following)
    )
