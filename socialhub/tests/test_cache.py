from unittest.mock import MagicMock, patch

from django.core.cache import cache
from django.test import SimpleTestCase

from socialhub.cache import cached, delete_cache, get_cache, set_cache


class CacheHelpersTestCase(SimpleTestCase):
    def setUp(self):
        cache.clear()

    def tearDown(self):
        cache.clear()

    def test_set_get_delete(self):
        self.assertTrue(set_cache("greeting", "hi", timeout=60))
        self.assertEqual(get_cache("greeting"), "hi")
        self.assertTrue(delete_cache("greeting"))
        self.assertIsNone(get_cache("greeting"))

    def test_cached_computes_once(self):
        producer = MagicMock(return_value={"ids": [1, 2]})
        self.assertEqual(cached("ranking", 60, producer), {"ids": [1, 2]})
        self.assertEqual(cached("ranking", 60, producer), {"ids": [1, 2]})
        producer.assert_called_once()

    def test_broken_backend_falls_back(self):
        broken = MagicMock()
        broken.get.side_effect = ConnectionError("redis down")
        broken.set.side_effect = ConnectionError("redis down")
        with patch("socialhub.cache.caches", {"default": broken}):
            with self.assertLogs("socialhub.cache", level="WARNING"):
                self.assertEqual(cached("ranking", 60, lambda: [3]), [3])
