"""
Post endpoints: create, feed, per-user listing, detail, update and delete.
"""

import logging

from django.http import HttpRequest
from ninja import Router
from ninja.responses import codes_4xx

from posts.schemas import (
    PostCreateIn,
    PostEnvelope,
    PostListEnvelope,
    PostOut,
    PostUpdateIn,
)
from posts.services import PostService, get_visible_post, liked_post_ids
from socialhub.schemas import EmptyEnvelope, ErrorOut, respond
from users.auth import JWTAuth, OptionalJWTAuth, current_user

router = Router(tags=["Posts"])

logger = logging.getLogger(__name__)


def post_page(result, viewer) -> dict:
    liked = liked_post_ids(viewer, result.items)
    return result.as_dict("posts", [PostOut.from_model(p, liked) for p in result.items])


@router.post("/", response={201: PostEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def create_post(request: HttpRequest, payload: PostCreateIn):
    post = PostService.create_post(
        request.auth,
        images=payload.images,
        caption=payload.caption,
        location=payload.location,
    )
    return respond(201, "Post created successfully", {"post": PostOut.from_model(post)})


@router.get(
    "/feed", response={200: PostListEnvelope, codes_4xx: ErrorOut}, auth=OptionalJWTAuth
)
def get_feed(request: HttpRequest, page: int = 1, limit: int = 10):
    result = PostService.get_feed(page, limit)
    return respond(200, "Feed retrieved successfully", post_page(result, current_user(request)))


@router.get(
    "/user/{user_id}",
    response={200: PostListEnvelope, codes_4xx: ErrorOut},
    auth=OptionalJWTAuth,
)
def get_user_posts(request: HttpRequest, user_id: int, page: int = 1, limit: int = 10):
    result = PostService.get_user_posts(user_id, page, limit)
    return respond(
        200, "User posts retrieved successfully", post_page(result, current_user(request))
    )


@router.get(
    "/{post_id}", response={200: PostEnvelope, codes_4xx: ErrorOut}, auth=OptionalJWTAuth
)
def get_post(request: HttpRequest, post_id: int):
    post = get_visible_post(post_id)
    liked = liked_post_ids(current_user(request), [post])
    return respond(
        200, "Post retrieved successfully", {"post": PostOut.from_model(post, liked)}
    )


@router.put("/{post_id}", response={200: PostEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth())
def update_post(request: HttpRequest, post_id: int, payload: PostUpdateIn):
    post = PostService.update_post(
        post_id, request.auth, caption=payload.caption, location=payload.location
    )
    liked = liked_post_ids(request.auth, [post])
    return respond(
        200, "Post updated successfully", {"post": PostOut.from_model(post, liked)}
    )


@router.delete(
    "/{post_id}", response={200: EmptyEnvelope, codes_4xx: ErrorOut}, auth=JWTAuth()
)
def delete_post(request: HttpRequest, post_id: int):
    PostService.delete_post(post_id, request.auth)
    return respond(200, "Post deleted successfully")
