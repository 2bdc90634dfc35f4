from datetime import timedelta

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from ninja.testing import TestClient

from posts.models import Post
from socialhub.api import api
from socialhub.testing import auth_headers, create_post, create_user


class SearchAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(api)
        self.user = create_user(username="surfer", full_name="Sam Waves")
        create_user(username="hiker", full_name="Hannah Trails")
        self.beach = create_post(self.user, caption="Morning surf", location="Biarritz")
        create_post(self.user, caption="Mountain hike", location="Chamonix")

    def test_search_users_by_name(self):
        response = self.client.get("/search/users?q=waves")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [u["username"] for u in response.json()["data"]["users"]], ["surfer"]
        )

    def test_search_posts_by_caption_or_location(self):
        response = self.client.get("/search/posts?q=biarritz")
        data = response.json()["data"]
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["posts"][0]["id"], self.beach.id)

        response = self.client.get("/search/posts?q=SURF")
        self.assertEqual(response.json()["data"]["total"], 1)

    def test_search_skips_deleted_posts(self):
        Post.objects.filter(pk=self.beach.pk).soft_delete()
        response = self.client.get("/search/posts?q=surf")
        self.assertEqual(response.json()["data"]["total"], 0)

    def test_blank_query_rejected(self):
        response = self.client.get("/search/posts?q=%20")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Search query is required")

    def test_global_search(self):
        response = self.client.get("/search/global?q=surf", headers=auth_headers(self.user))
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["totalUsers"], 1)
        self.assertEqual(data["totalPosts"], 1)
        self.assertEqual(data["users"][0]["username"], "surfer")
        self.assertFalse(data["posts"][0]["isLiked"])


class ExploreAPITestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = TestClient(api)
        self.author = create_user()
        self.quiet = create_post(self.author)
        self.liked = create_post(self.author, likes_count=5)
        self.discussed = create_post(self.author, likes_count=5, comments_count=3)
        self.old_hit = create_post(self.author, likes_count=50)
        Post.objects.filter(pk=self.old_hit.pk).update(
            created_at=timezone.now() - timedelta(hours=48)
        )

    def tearDown(self):
        cache.clear()

    def ids(self, path):
        return [p["id"] for p in self.client.get(path).json()["data"]["posts"]]

    def test_trending_uses_last_day_only(self):
        self.assertEqual(
            self.ids("/explore/trending"),
            [self.discussed.id, self.liked.id, self.quiet.id],
        )

    def test_popular_includes_older_posts(self):
        self.assertEqual(
            self.ids("/explore/popular"),
            [self.old_hit.id, self.discussed.id, self.liked.id, self.quiet.id],
        )

    def test_recent_is_newest_first(self):
        self.assertEqual(
            self.ids("/explore/recent"),
            [self.discussed.id, self.liked.id, self.quiet.id, self.old_hit.id],
        )

    def test_ranking_is_cached_but_posts_are_fresh(self):
        self.ids("/explore/popular")
        Post.objects.filter(pk=self.quiet.pk).update(likes_count=100, caption="updated")

        response = self.client.get("/explore/popular")
        posts = response.json()["data"]["posts"]
        self.assertEqual(posts[-1]["id"], self.quiet.id)
        self.assertEqual(posts[-1]["caption"], "updated")

    def test_deleted_post_drops_out_of_cached_ranking(self):
        self.ids("/explore/recent")
        Post.objects.filter(pk=self.liked.pk).soft_delete()
        self.assertNotIn(self.liked.id, self.ids("/explore/recent"))

    def test_pagination(self):
        response = self.client.get("/explore/popular?page=2&limit=3")
        data = response.json()["data"]
        self.assertEqual(data["total"], 4)
        self.assertEqual(data["pages"], 2)
        self.assertEqual([p["id"] for p in data["posts"]], [self.quiet.id])
