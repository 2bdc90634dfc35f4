"""
Thin wrappers over the Django cache. A broken cache backend must never fail
a request, so reads fall back to the default and writes report False.
"""

import logging

from django.core.cache import caches

logger = logging.getLogger(__name__)


def get_cache(key: str, default=None, cache_name="default"):
    try:
        return caches[cache_name].get(key, default=default)
    except Exception as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        return default


def set_cache(key: str, value, timeout=None, cache_name="default") -> bool:
    try:
        caches[cache_name].set(key, value, timeout=timeout)
        return True
    except Exception as e:
        logger.warning(f"Cache write failed for {key}: {e}")
        return False


def delete_cache(key: str, cache_name="default") -> bool:
    try:
        caches[cache_name].delete(key)
        return True
    except Exception as e:
        logger.warning(f"Cache delete failed for {key}: {e}")
        return False


def cached(key: str, timeout: int, producer):
    """Return the cached value for key, computing and storing it on a miss."""
    value = get_cache(key)
    if value is None:
        value = producer()
        set_cache(key, value, timeout=timeout)
    return value
