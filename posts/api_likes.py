import logging

from django.http import HttpRequest
from ninja import Router
from ninja.responses import codes_4xx

from posts.schemas import LikeListEnvelope, LikeOut, LikeStatusEnvelope
from posts.services import LikeService
from socialhub.schemas import ErrorOut, UserPublic, respond
from users.auth import JWTAuth

router = Router(tags=["Likes"])

logger = logging.getLogger(__name__)


@router.post(
    "/{post_id}", response={201: LikeStatusEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def like_post(request: HttpRequest, post_id: int):
    post = LikeService.like_post(post_id, request.auth)
    return respond(
        201, "Post liked successfully", {"isLiked": True, "likesCount": post.likes_count}
    )


@router.delete(
    "/{post_id}", response={200: LikeStatusEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def unlike_post(request: HttpRequest, post_id: int):
    post = LikeService.unlike_post(post_id, request.auth)
    return respond(
        200,
        "Post unliked successfully",
        {"isLiked": False, "likesCount": post.likes_count},
    )


@router.get("/{post_id}", response={200: LikeListEnvelope, codes_4xx: ErrorOut})
def get_post_likes(request: HttpRequest, post_id: int, page: int = 1, limit: int = 20):
    result = LikeService.get_post_likes(post_id, page, limit)
    likes = [
        LikeOut(user=UserPublic.from_model(like.user), likedAt=like.created_at)
        for like in result.items
    ]
    return respond(200, "Likes retrieved successfully", result.as_dict("likes", likes))
