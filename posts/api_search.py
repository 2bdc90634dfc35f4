"""
Search across users and posts
"""

import logging

from django.http import HttpRequest
from django_ratelimit.decorators import ratelimit
from ninja import Router
from ninja.responses import codes_4xx

from posts.schemas import GlobalSearchEnvelope, PostListEnvelope, PostOut
from posts.services import PostService, liked_post_ids
from socialhub.constants import GLOBAL_SEARCH_LIMIT, SEARCH_USERS_LIMIT
from socialhub.pagination import clamp
from socialhub.schemas import ErrorOut, UserPublic, respond
from users.auth import OptionalJWTAuth, current_user
from users.schemas import UserSearchEnvelope
from users.services import UserService

router = Router(tags=["Search"])

logger = logging.getLogger(__name__)


@router.get("/users", response={200: UserSearchEnvelope, codes_4xx: ErrorOut})
@ratelimit(key="ip", rate="30/m", block=True)
def search_users(request: HttpRequest, q: str = "", limit: int = 10):
    _, limit = clamp(1, limit, SEARCH_USERS_LIMIT[1], SEARCH_USERS_LIMIT[0])
    users = UserService.search(q, limit)
    return respond(
        200,
        "Users retrieved successfully",
        {"users": [UserPublic.from_model(user) for user in users]},
    )


@router.get(
    "/posts", response={200: PostListEnvelope, codes_4xx: ErrorOut}, auth=OptionalJWTAuth
)
@ratelimit(key="ip", rate="30/m", block=True)
def search_posts(request: HttpRequest, q: str = "", page: int = 1, limit: int = 20):
    result = PostService.search_posts(q, page, limit)
    liked = liked_post_ids(current_user(request), result.items)
    posts = [PostOut.from_model(post, liked) for post in result.items]
    return respond(200, "Posts retrieved successfully", result.as_dict("posts", posts))


@router.get(
    "/global",
    response={200: GlobalSearchEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
@ratelimit(key="ip", rate="30/m", block=True)
def search_global(request: HttpRequest, q: str = "", limit: int = 5):
    _, limit = clamp(1, limit, GLOBAL_SEARCH_LIMIT[1], GLOBAL_SEARCH_LIMIT[0])
    users = UserService.search_queryset(q)
    posts = PostService.search_posts(q, 1, limit)
    liked = liked_post_ids(current_user(request), posts.items)
    return respond(
        200,
        "Search results retrieved successfully",
        {
            "users": [UserPublic.from_model(user) for user in users[:limit]],
            "posts": [PostOut.from_model(post, liked) for post in posts.items],
            "totalUsers": users.count(),
            "totalPosts": posts.total,
        },
    )
