"""
Key-value store helpers for named buckets.

Each bucket is a single JSON document stored under its key in the
"default" cache (Redis via django-redis in production). Values never
expire; a write always overwrites the whole bucket.
"""
from django.core.cache import caches
import json
import logging

logger = logging.getLogger(__name__)

KV_CACHE_ALIAS = 'default'


def get_kv_cache():
    """Return the cache backing the bucket store"""
    return caches[KV_CACHE_ALIAS]


def get_from_redis(key: str):
    """
    Get the decoded value stored under key.

    Returns:
        The stored value, or None when the key is absent or holds
        malformed JSON. Connection errors propagate to the caller.
    """
    raw = get_kv_cache().get(key)
    if raw is None:
        return None

    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Malformed JSON stored under {key}, treating as absent: {str(e)}")
        return None


def set_to_redis(key: str, value):
    """Overwrite the bucket stored under key"""
    encoded = json.dumps(value)
    get_kv_cache().set(key, encoded, None)
    logger.debug(f"Stored bucket {key} ({len(encoded)} bytes)")


def delete_from_redis(key: str):
    """Delete a bucket entirely (maintenance only)"""
    get_kv_cache().delete(key)
    logger.info(f"Deleted bucket {key}")
