from django.test import TestCase
from ninja.testing import TestClient

from notifications.models import Notification
from posts.models import Comment
from socialhub.api import api
from socialhub.realtime import registry
from socialhub.testing import auth_headers, capture_pushes, create_post, create_user


class CommentAPITestCase(TestCase):
    def setUp(self):
        registry.clear()
        self.client = TestClient(api)
        self.author = create_user(username="author")
        self.alice = create_user(username="alice")
        self.bob = create_user(username="bob")
        self.post = create_post(self.author)

    def tearDown(self):
        registry.clear()

    def comment(self, user, content="Nice shot", parent_id=None, post=None):
        post = post or self.post
        return self.client.post(
            f"/comments/post/{post.id}",
            json={"content": content, "parentId": parent_id},
            headers=auth_headers(user),
        )

    def test_comment_and_reply_counters(self):
        response = self.comment(self.alice)
        self.assertEqual(response.status_code, 201)
        parent_id = response.json()["data"]["comment"]["id"]

        response = self.comment(self.bob, "Agreed", parent_id=parent_id)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"]["comment"]["parentId"], parent_id)

        self.post.refresh_from_db()
        self.assertEqual(self.post.comments_count, 2)
        self.assertEqual(Comment.objects.get(pk=parent_id).replies_count, 1)

        comment_notification = Notification.objects.get(recipient=self.author)
        self.assertEqual(comment_notification.type, Notification.NotificationType.COMMENT)
        reply_notification = Notification.objects.get(recipient=self.alice)
        self.assertEqual(
            reply_notification.type, Notification.NotificationType.COMMENT_REPLY
        )
        self.assertEqual(reply_notification.sender, self.bob)

    def test_top_level_list_excludes_replies(self):
        parent_id = self.comment(self.alice).json()["data"]["comment"]["id"]
        self.comment(self.bob, "Reply", parent_id=parent_id)

        response = self.client.get(f"/comments/post/{self.post.id}")
        data = response.json()["data"]
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["comments"][0]["repliesCount"], 1)

        response = self.client.get(f"/comments/{parent_id}/replies")
        replies = response.json()["data"]["replies"]
        self.assertEqual([r["content"] for r in replies], ["Reply"])

    def test_replies_are_oldest_first(self):
        parent_id = self.comment(self.alice).json()["data"]["comment"]["id"]
        self.comment(self.bob, "first", parent_id=parent_id)
        self.comment(self.author, "second", parent_id=parent_id)

        response = self.client.get(f"/comments/{parent_id}/replies")
        replies = response.json()["data"]["replies"]
        self.assertEqual([r["content"] for r in replies], ["first", "second"])

    def test_parent_from_another_post(self):
        other_post = create_post(self.bob)
        parent_id = self.comment(self.alice, post=other_post).json()["data"]["comment"]["id"]

        response = self.comment(self.bob, parent_id=parent_id)
        self.assertEqual(response.status_code, 403)

    def test_reply_to_reply_rejected(self):
        parent_id = self.comment(self.alice).json()["data"]["comment"]["id"]
        reply_id = self.comment(self.bob, parent_id=parent_id).json()["data"]["comment"]["id"]

        response = self.comment(self.alice, parent_id=reply_id)
        self.assertEqual(response.status_code, 400)

    def test_missing_parent(self):
        response = self.comment(self.alice, parent_id=999999)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Parent comment not found")

    def test_empty_content_rejected(self):
        response = self.comment(self.alice, content="")
        self.assertEqual(response.status_code, 400)

    def test_comment_on_own_post_is_silent(self):
        registry.register(self.author.id, "author-channel")
        with capture_pushes() as pushes:
            self.comment(self.author)

        self.assertFalse(Notification.objects.exists())
        self.assertEqual(pushes.all(), [])

    def test_comment_pushes_to_post_author(self):
        registry.register(self.author.id, "author-channel")
        with capture_pushes() as pushes:
            response = self.comment(self.alice, "Great light")

        self.assertCountEqual(
            pushes.events("author-channel"), ["notification:new", "comment:new"]
        )
        payload = pushes.data("comment:new")[0]
        self.assertEqual(payload["postId"], self.post.id)
        self.assertEqual(payload["comment"]["id"], response.json()["data"]["comment"]["id"])
        self.assertEqual(payload["comment"]["content"], "Great light")

    def test_delete_reply_restores_counters_and_notification(self):
        parent_id = self.comment(self.alice).json()["data"]["comment"]["id"]
        reply_id = self.comment(self.bob, parent_id=parent_id).json()["data"]["comment"]["id"]

        response = self.client.delete(f"/comments/{reply_id}", headers=auth_headers(self.alice))
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(f"/comments/{reply_id}", headers=auth_headers(self.bob))
        self.assertEqual(response.status_code, 200)

        self.post.refresh_from_db()
        self.assertEqual(self.post.comments_count, 1)
        self.assertEqual(Comment.objects.get(pk=parent_id).replies_count, 0)
        self.assertFalse(Notification.objects.filter(recipient=self.alice).exists())
        self.assertTrue(Notification.objects.filter(recipient=self.author).exists())

        response = self.client.get(f"/comments/{reply_id}")
        self.assertEqual(response.status_code, 404)

    def test_comments_of_deleted_post_are_hidden(self):
        comment_id = self.comment(self.alice).json()["data"]["comment"]["id"]
        self.client.delete(f"/posts/{self.post.id}", headers=auth_headers(self.author))

        response = self.client.get(f"/comments/{comment_id}")
        self.assertEqual(response.status_code, 404)

    def test_update_comment(self):
        comment_id = self.comment(self.alice).json()["data"]["comment"]["id"]

        response = self.client.put(
            f"/comments/{comment_id}", json={"content": "edited"}, headers=auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.put(
            f"/comments/{comment_id}", json={"content": "edited"}, headers=auth_headers(self.alice)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["comment"]["content"], "edited")


class CommentLikeAPITestCase(TestCase):
    def setUp(self):
        registry.clear()
        self.client = TestClient(api)
        self.alice = create_user(username="alice")
        self.bob = create_user(username="bob")
        post = create_post(self.bob)
        self.comment = Comment.objects.create(post=post, author=self.alice, content="Hi")

    def tearDown(self):
        registry.clear()

    def test_like_and_unlike_comment(self):
        registry.register(self.alice.id, "alice-channel")
        with capture_pushes() as pushes:
            response = self.client.post(
                f"/comments/{self.comment.id}/like", headers=auth_headers(self.bob)
            )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["data"], {"isLiked": True, "likesCount": 1})
        self.assertCountEqual(
            pushes.events("alice-channel"), ["notification:new", "comment:like"]
        )
        self.assertEqual(
            Notification.objects.get(recipient=self.alice).type,
            Notification.NotificationType.COMMENT_LIKE,
        )

        response = self.client.get(
            f"/comments/{self.comment.id}", headers=auth_headers(self.bob)
        )
        self.assertTrue(response.json()["data"]["comment"]["isLiked"])

        response = self.client.post(
            f"/comments/{self.comment.id}/like", headers=auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 409)

        with capture_pushes() as pushes:
            response = self.client.delete(
                f"/comments/{self.comment.id}/like", headers=auth_headers(self.bob)
            )
        self.assertEqual(response.json()["data"], {"isLiked": False, "likesCount": 0})
        self.assertIn("comment:unlike", pushes.events("alice-channel"))
        self.assertFalse(Notification.objects.exists())

    def test_unlike_without_like(self):
        response = self.client.delete(
            f"/comments/{self.comment.id}/like", headers=auth_headers(self.bob)
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Comment like not found")
