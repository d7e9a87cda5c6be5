"""
Local mirror of the remote buckets.

Plays the role of browser local storage for the persistence facade: every
save is mirrored here as a JSON string under the same key, and reads fall
back to it when the remote endpoint cannot be reached. Backed by the
"local" cache alias (file based, no expiry).
"""
from django.core.cache import caches
import logging

logger = logging.getLogger(__name__)

LOCAL_CACHE_ALIAS = 'local'


class LocalStorage:
    """Minimal getItem/setItem/removeItem store over a Django cache alias"""

    def __init__(self, alias: str = LOCAL_CACHE_ALIAS):
        self.alias = alias

    @property
    def cache(self):
        return caches[self.alias]

    def get_item(self, key: str):
        """Return the raw string stored under key, or None"""
        return self.cache.get(key)

    def set_item(self, key: str, value: str):
        self.cache.set(key, value, None)

    def remove_item(self, key: str):
        self.cache.delete(key)

    def clear(self):
        self.cache.clear()
