"""
Explore endpoints: trending (last 24 hours), popular and recent posts
"""

from django.http import HttpRequest
from django_ratelimit.decorators import ratelimit
from ninja import Router
from ninja.responses import codes_4xx

from posts.schemas import PostListEnvelope, PostOut
from posts.services import ExploreService, liked_post_ids
from socialhub.schemas import ErrorOut, respond
from users.auth import OptionalJWTAuth, current_user

router = Router(tags=["Explore"])


def explore_response(request, kind: str, page: int, limit: int, message: str):
    result = ExploreService.get_posts(kind, page, limit)
    liked = liked_post_ids(current_user(request), result.items)
    posts = [PostOut.from_model(post, liked) for post in result.items]
    return respond(200, message, result.as_dict("posts", posts))


@router.get(
    "/trending",
    response={200: PostListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
@ratelimit(key="ip", rate="60/m", block=True)
def trending_posts(request: HttpRequest, page: int = 1, limit: int = 20):
    return explore_response(
        request, "trending", page, limit, "Trending posts retrieved successfully"
    )


@router.get(
    "/popular",
    response={200: PostListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
@ratelimit(key="ip", rate="60/m", block=True)
def popular_posts(request: HttpRequest, page: int = 1, limit: int = 20):
    return explore_response(
        request, "popular", page, limit, "Popular posts retrieved successfully"
    )


@router.get(
    "/recent",
    response={200: PostListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
@ratelimit(key="ip", rate="60/m", block=True)
def recent_posts(request: HttpRequest, page: int = 1, limit: int = 20):
    return explore_response(
        request, "recent", page, limit, "Recent posts retrieved successfully"
    )
