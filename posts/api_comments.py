"""
Comment endpoints, including one level of replies and comment likes.
"""

import logging

from django.http import HttpRequest
from ninja import Router
from ninja.responses import codes_4xx

from posts.schemas import (
    CommentCreateIn,
    CommentEnvelope,
    CommentListEnvelope,
    CommentOut,
    CommentUpdateIn,
    LikeStatusEnvelope,
    ReplyListEnvelope,
)
from posts.services import (
    CommentLikeService,
    CommentService,
    get_visible_comment,
    liked_comment_ids,
)
from socialhub.schemas import EmptyEnvelope, ErrorOut, respond
from users.auth import JWTAuth, OptionalJWTAuth, current_user

router = Router(tags=["Comments"])

logger = logging.getLogger(__name__)


def comment_list(result, viewer):
    liked = liked_comment_ids(viewer, result.items)
    return [CommentOut.from_model(c, liked) for c in result.items]


@router.post(
    "/post/{post_id}",
    response={201: CommentEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def create_comment(request: HttpRequest, post_id: int, payload: CommentCreateIn):
    comment = CommentService.create_comment(
        post_id, request.auth, payload.content, parent_id=payload.parentId
    )
    return respond(
        201, "Comment created successfully", {"comment": CommentOut.from_model(comment)}
    )


@router.get(
    "/post/{post_id}",
    response={200: CommentListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
def get_post_comments(request: HttpRequest, post_id: int, page: int = 1, limit: int = 20):
    result = CommentService.get_post_comments(post_id, page, limit)
    comments = comment_list(result, current_user(request))
    return respond(
        200, "Comments retrieved successfully", result.as_dict("comments", comments)
    )


@router.get(
    "/{comment_id}",
    response={200: CommentEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
def get_comment(request: HttpRequest, comment_id: int):
    comment = get_visible_comment(comment_id)
    liked = liked_comment_ids(current_user(request), [comment])
    return respond(
        200,
        "Comment retrieved successfully",
        {"comment": CommentOut.from_model(comment, liked)},
    )


@router.get(
    "/{comment_id}/replies",
    response={200: ReplyListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
def get_replies(request: HttpRequest, comment_id: int, page: int = 1, limit: int = 10):
    result = CommentService.get_comment_replies(comment_id, page, limit)
    replies = comment_list(result, current_user(request))
    return respond(200, "Replies retrieved successfully", result.as_dict("replies", replies))


@router.put(
    "/{comment_id}", response={200: CommentEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def update_comment(request: HttpRequest, comment_id: int, payload: CommentUpdateIn):
    comment = CommentService.update_comment(comment_id, request.auth, payload.content)
    liked = liked_comment_ids(request.auth, [comment])
    return respond(
        200,
        "Comment updated successfully",
        {"comment": CommentOut.from_model(comment, liked)},
    )


@router.delete(
    "/{comment_id}", response={200: EmptyEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def delete_comment(request: HttpRequest, comment_id: int):
    CommentService.delete_comment(comment_id, request.auth)
    return respond(200, "Comment deleted successfully")


@router.post(
    "/{comment_id}/like",
    response={201: LikeStatusEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def like_comment(request: HttpRequest, comment_id: int):
    comment = CommentLikeService.like_comment(comment_id, request.auth)
    return respond(
        201,
        "Comment liked successfully",
        {"isLiked": True, "likesCount": comment.likes_count},
    )


@router.delete(
    "/{comment_id}/like",
    response={200: LikeStatusEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def unlike_comment(request: HttpRequest, comment_id: int):
    comment = CommentLikeService.unlike_comment(comment_id, request.auth)
    return respond(
        200,
        "Comment unliked successfully",
        {"isLiked": False, "likesCount": comment.likes_count},
    )
