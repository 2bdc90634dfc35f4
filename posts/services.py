"""
Posts, likes, comments and comment likes.

Every counter change happens in the same transaction as the row that causes
it, and the increment itself is done by the database through F() so parallel
requests never lose an update.
"""

import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from notifications.models import Notification
from notifications.services import NotificationService
from posts.models import Comment, CommentLike, Like, Post
from posts.schemas import CommentOut
from socialhub.cache import cached
from socialhub.constants import (
    COMMENTS_PAGE,
    EXPLORE_PAGE,
    LIKES_PAGE,
    ONE_MINUTE,
    POSTS_PAGE,
    REPLIES_PAGE,
    SEARCH_POSTS_PAGE,
    TRENDING_WINDOW_HOURS,
)
from socialhub.errors import Conflict, Forbidden, NotFound, ValidationFailed
from socialhub.pagination import Page, clamp, page_count, paginate
from socialhub.realtime import EventTypes, emit_to_user

logger = logging.getLogger(__name__)

NotificationType = Notification.NotificationType


def get_visible_post(post_id: int) -> Post:
    post = Post.objects.visible().select_related("author").filter(pk=post_id).first()
    if post is None:
        raise NotFound("Post")
    return post


def get_visible_comment(comment_id: int, resource: str = "Comment") -> Comment:
    comment = (
        Comment.objects.visible()
        .select_related("author", "post")
        .filter(pk=comment_id)
        .first()
    )
    if comment is None:
        raise NotFound(resource)
    return comment


def liked_post_ids(user, posts) -> set:
    if user is None or not posts:
        return set()
    return set(
        Like.objects.filter(user=user, post__in=posts).values_list("post_id", flat=True)
    )


def liked_comment_ids(user, comments) -> set:
    if user is None or not comments:
        return set()
    return set(
        CommentLike.objects.filter(user=user, comment__in=comments).values_list(
            "comment_id", flat=True
        )
    )


class PostService:
    @staticmethod
    def create_post(author, images, caption: str = "", location: str = "") -> Post:
        post = Post.objects.create(
            author=author, images=images, caption=caption, location=location
        )
        logger.info(f"User {author.id} created post {post.id}")
        return post

    @staticmethod
    def get_feed(page, limit) -> Page:
        queryset = (
            Post.objects.visible()
            .filter(author__is_deleted=False)
            .select_related("author")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, POSTS_PAGE)

    @staticmethod
    def get_user_posts(user_id: int, page, limit) -> Page:
        queryset = (
            Post.objects.visible()
            .filter(author_id=user_id, author__is_deleted=False)
            .select_related("author")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, POSTS_PAGE)

    @staticmethod
    def update_post(post_id: int, user, caption=None, location=None) -> Post:
        post = get_visible_post(post_id)
        if post.author_id != user.id:
            raise Forbidden("You can only update your own posts")

        if caption is not None:
            post.caption = caption
        if location is not None:
            post.location = location
        post.save()
        return post

    @staticmethod
    def delete_post(post_id: int, user):
        post = get_visible_post(post_id)
        if post.author_id != user.id:
            raise Forbidden("You can only delete your own posts")

        Post.objects.filter(pk=post.pk).soft_delete()
        logger.info(f"User {user.id} deleted post {post.id}")

    @staticmethod
    def search_posts(query: str, page, limit) -> Page:
        query = query.strip()
        if not query:
            raise ValidationFailed("Search query is required")
        queryset = (
            Post.objects.visible()
            .filter(Q(caption__icontains=query) | Q(location__icontains=query))
            .filter(author__is_deleted=False)
            .select_related("author")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, SEARCH_POSTS_PAGE)


class ExploreService:
    ORDERINGS = {
        "trending": ("-likes_count", "-comments_count", "-created_at", "-id"),
        "popular": ("-likes_count", "-comments_count", "-created_at", "-id"),
        "recent": ("-created_at", "-id"),
    }

    @staticmethod
    def get_posts(kind: str, page, limit) -> Page:
        """
        Ranked post listings. The ranking (ids and total) is cached for a
        minute; the posts themselves are always loaded fresh.
        """
        default_limit, max_limit = EXPLORE_PAGE
        page, limit = clamp(page, limit, max_limit, default_limit)
        key = f"explore:{kind}:{page}:{limit}"

        def rank():
            queryset = Post.objects.visible().filter(author__is_deleted=False)
            if kind == "trending":
                since = timezone.now() - timedelta(hours=TRENDING_WINDOW_HOURS)
                queryset = queryset.filter(created_at__gte=since)
            queryset = queryset.order_by(*ExploreService.ORDERINGS[kind])
            result = paginate(queryset.values_list("id", flat=True), page, limit, EXPLORE_PAGE)
            return {"ids": result.items, "total": result.total}

        ranking = cached(key, ONE_MINUTE, rank)
        posts = Post.objects.visible().select_related("author").in_bulk(ranking["ids"])
        items = [posts[post_id] for post_id in ranking["ids"] if post_id in posts]
        return Page(
            items=items,
            total=ranking["total"],
            page=page,
            limit=limit,
            pages=page_count(ranking["total"], limit),
        )


class LikeService:
    @staticmethod
    def like_post(post_id: int, user) -> Post:
        post = get_visible_post(post_id)
        if Like.objects.filter(post=post, user=user).exists():
            raise Conflict("You have already liked this post")

        try:
            with transaction.atomic():
                Like.objects.create(post=post, user=user)
                Post.objects.filter(pk=post.pk).update(likes_count=F("likes_count") + 1)
        except IntegrityError:
            raise Conflict("You have already liked this post")

        post.refresh_from_db(fields=["likes_count"])
        NotificationService.create_notification(
            recipient=post.author, sender=user, type=NotificationType.LIKE, post=post
        )
        if post.author_id != user.id:
            emit_to_user(
                post.author_id,
                EventTypes.POST_LIKE,
                {"postId": post.id, "userId": user.id, "likesCount": post.likes_count},
            )
        return post

    @staticmethod
    def unlike_post(post_id: int, user) -> Post:
        post = get_visible_post(post_id)
        with transaction.atomic():
            deleted, _ = Like.objects.filter(post=post, user=user).delete()
            if not deleted:
                raise NotFound("Like")
            Post.objects.filter(pk=post.pk).update(likes_count=F("likes_count") - 1)

        post.refresh_from_db(fields=["likes_count"])
        NotificationService.delete_notification_by_action(
            recipient=post.author, sender=user, type=NotificationType.LIKE, post=post
        )
        if post.author_id != user.id:
            emit_to_user(
                post.author_id,
                EventTypes.POST_UNLIKE,
                {"postId": post.id, "userId": user.id, "likesCount": post.likes_count},
            )
        return post

    @staticmethod
    def get_post_likes(post_id: int, page, limit) -> Page:
        post = get_visible_post(post_id)
        queryset = (
            Like.objects.filter(post=post, user__is_deleted=False)
            .select_related("user")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, LIKES_PAGE)


class CommentService:
    @staticmethod
    def create_comment(post_id: int, user, content: str, parent_id=None) -> Comment:
        post = get_visible_post(post_id)

        parent = None
        if parent_id is not None:
            parent = get_visible_comment(parent_id, "Parent comment")
            if parent.post_id != post.id:
                raise Forbidden("Parent comment does not belong to this post")
            if parent.parent_id is not None:
                raise ValidationFailed("Replies can only be one level deep")

        with transaction.atomic():
            comment = Comment.objects.create(
                post=post, author=user, content=content, parent=parent
            )
            Post.objects.filter(pk=post.pk).update(
                comments_count=F("comments_count") + 1
            )
            if parent is not None:
                Comment.objects.filter(pk=parent.pk).update(
                    replies_count=F("replies_count") + 1
                )

        if parent is not None:
            NotificationService.create_notification(
                recipient=parent.author,
                sender=user,
                type=NotificationType.COMMENT_REPLY,
                post=post,
                comment=comment,
            )
        else:
            NotificationService.create_notification(
                recipient=post.author,
                sender=user,
                type=NotificationType.COMMENT,
                post=post,
                comment=comment,
            )

        if post.author_id != user.id:
            emit_to_user(
                post.author_id,
                EventTypes.COMMENT_NEW,
                {
                    "postId": post.id,
                    "comment": CommentOut.from_model(comment).model_dump(mode="json"),
                },
            )
        return comment

    @staticmethod
    def get_post_comments(post_id: int, page, limit) -> Page:
        post = get_visible_post(post_id)
        queryset = (
            Comment.objects.visible()
            .filter(post=post, parent__isnull=True)
            .select_related("author")
            .order_by("-created_at", "-id")
        )
        return paginate(queryset, page, limit, COMMENTS_PAGE)

    @staticmethod
    def get_comment_replies(comment_id: int, page, limit) -> Page:
        comment = get_visible_comment(comment_id)
        queryset = (
            Comment.objects.visible()
            .filter(parent=comment)
            .select_related("author")
            .order_by("created_at", "id")
        )
        return paginate(queryset, page, limit, REPLIES_PAGE)

    @staticmethod
    def update_comment(comment_id: int, user, content: str) -> Comment:
        comment = get_visible_comment(comment_id)
        if comment.author_id != user.id:
            raise Forbidden("You can only update your own comments")

        comment.content = content
        comment.save(update_fields=["content", "updated_at"])
        return comment

    @staticmethod
    def delete_comment(comment_id: int, user):
        comment = get_visible_comment(comment_id)
        if comment.author_id != user.id:
            raise Forbidden("You can only delete your own comments")

        parent = comment.parent
        with transaction.atomic():
            Comment.objects.filter(pk=comment.pk).soft_delete()
            Post.objects.filter(pk=comment.post_id).update(
                comments_count=F("comments_count") - 1
            )
            if parent is not None:
                Comment.objects.filter(pk=parent.pk).update(
                    replies_count=F("replies_count") - 1
                )

        if parent is not None:
            NotificationService.delete_notification_by_action(
                recipient=parent.author,
                sender=user,
                type=NotificationType.COMMENT_REPLY,
                comment=comment,
            )
        else:
            NotificationService.delete_notification_by_action(
                recipient=comment.post.author,
                sender=user,
                type=NotificationType.COMMENT,
                comment=comment,
            )
        logger.info(f"User {user.id} deleted comment {comment.id}")


class CommentLikeService:
    @staticmethod
    def like_comment(comment_id: int, user) -> Comment:
        comment = get_visible_comment(comment_id)
        if CommentLike.objects.filter(comment=comment, user=user).exists():
            raise Conflict("You have already liked this comment")

        try:
            with transaction.atomic():
                CommentLike.objects.create(comment=comment, user=user)
                Comment.objects.filter(pk=comment.pk).update(
                    likes_count=F("likes_count") + 1
                )
        except IntegrityError:
            raise Conflict("You have already liked this comment")

        comment.refresh_from_db(fields=["likes_count"])
        NotificationService.create_notification(
            recipient=comment.author,
            sender=user,
            type=NotificationType.COMMENT_LIKE,
            post=comment.post,
            comment=comment,
        )
        if comment.author_id != user.id:
            emit_to_user(
                comment.author_id,
                EventTypes.COMMENT_LIKE,
                {
                    "commentId": comment.id,
                    "postId": comment.post_id,
                    "userId": user.id,
                    "likesCount": comment.likes_count,
                },
            )
        return comment

    @staticmethod
    def unlike_comment(comment_id: int, user) -> Comment:
        comment = get_visible_comment(comment_id)
        with transaction.atomic():
            deleted, _ = CommentLike.objects.filter(comment=comment, user=user).delete()
            if not deleted:
                raise NotFound("Comment like")
            Comment.objects.filter(pk=comment.pk).update(
                likes_count=F("likes_count") - 1
            )

        comment.refresh_from_db(fields=["likes_count"])
        NotificationService.delete_notification_by_action(
            recipient=comment.author,
            sender=user,
            type=NotificationType.COMMENT_LIKE,
            comment=comment,
        )
        if comment.author_id != user.id:
            emit_to_user(
                comment.author_id,
                EventTypes.COMMENT_UNLIKE,
                {
                    "commentId": comment.id,
                    "postId": comment.post_id,
                    "userId": user.id,
                    "likesCount": comment.likes_count,
                },
            )
        return comment
