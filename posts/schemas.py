"""
Input and output schemas for posts, likes and comments
"""

from datetime import datetime
from typing import List, Optional

from ninja import Schema
from pydantic import Field

from socialhub.constants import (
    CAPTION_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
    LOCATION_MAX_LENGTH,
    MAX_POST_IMAGES,
)
from socialhub.schemas import Envelope, UserPublic

"""
Post Schemas
"""


class PostCreateIn(Schema):
    images: List[str] = Field(min_length=1, max_length=MAX_POST_IMAGES)
    caption: str = Field(default="", max_length=CAPTION_MAX_LENGTH)
    location: str = Field(default="", max_length=LOCATION_MAX_LENGTH)


class PostUpdateIn(Schema):
    caption: Optional[str] = Field(default=None, max_length=CAPTION_MAX_LENGTH)
    location: Optional[str] = Field(default=None, max_length=LOCATION_MAX_LENGTH)


class PostOut(Schema):
    id: int
    author: UserPublic
    images: List[str]
    caption: str
    location: str
    likesCount: int
    commentsCount: int
    isLiked: bool = False
    createdAt: datetime
    updatedAt: datetime

    @staticmethod
    def from_model(post, liked_post_ids=()) -> "PostOut":
        return PostOut(
            id=post.id,
            author=UserPublic.from_model(post.author),
            images=post.images,
            caption=post.caption,
            location=post.location,
            likesCount=post.likes_count,
            commentsCount=post.comments_count,
            isLiked=post.id in liked_post_ids,
            createdAt=post.created_at,
            updatedAt=post.updated_at,
        )


class PostData(Schema):
    post: PostOut


class PostEnvelope(Envelope):
    data: PostData


class PostListData(Schema):
    posts: List[PostOut]
    total: int
    page: int
    pages: int


class PostListEnvelope(Envelope):
    data: PostListData


class ImageUploadData(Schema):
    images: List[str]


class ImageUploadEnvelope(Envelope):
    data: ImageUploadData


"""
Like Schemas
"""


class LikeStatusData(Schema):
    isLiked: bool
    likesCount: int


class LikeStatusEnvelope(Envelope):
    data: LikeStatusData


class LikeOut(Schema):
    user: UserPublic
    likedAt: datetime


class LikeListData(Schema):
    likes: List[LikeOut]
    total: int
    page: int
    pages: int


class LikeListEnvelope(Envelope):
    data: LikeListData


"""
Comment Schemas
"""


class CommentCreateIn(Schema):
    content: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)
    parentId: Optional[int] = None


class CommentUpdateIn(Schema):
    content: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)


class CommentOut(Schema):
    id: int
    postId: int
    author: UserPublic
    content: str
    parentId: Optional[int] = None
    likesCount: int
    repliesCount: int
    isLiked: bool = False
    createdAt: datetime
    updatedAt: datetime

    @staticmethod
    def from_model(comment, liked_comment_ids=()) -> "CommentOut":
        return CommentOut(
            id=comment.id,
            postId=comment.post_id,
            author=UserPublic.from_model(comment.author),
            content=comment.content,
            parentId=comment.parent_id,
            likesCount=comment.likes_count,
            repliesCount=comment.replies_count,
            isLiked=comment.id in liked_comment_ids,
            createdAt=comment.created_at,
            updatedAt=comment.updated_at,
        )


class CommentData(Schema):
    comment: CommentOut


class CommentEnvelope(Envelope):
    data: CommentData


class CommentListData(Schema):
    comments: List[CommentOut]
    total: int
    page: int
    pages: int


class CommentListEnvelope(Envelope):
    data: CommentListData


class ReplyListData(Schema):
    replies: List[CommentOut]
    total: int
    page: int
    pages: int


class ReplyListEnvelope(Envelope):
    data: ReplyListData


"""
Search Schemas
"""


class GlobalSearchData(Schema):
    users: List[UserPublic]
    posts: List[PostOut]
    totalUsers: int
    totalPosts: int


class GlobalSearchEnvelope(Envelope):
    data: GlobalSearchData
