"""
Persistence facade used by every entity store.

fetch_data/save_data talk to the /api/data endpoint and fall back to the
local mirror when the endpoint cannot be reached. Neither ever raises:
every failure resolves to the caller's fallback or to False.
"""
import json
import logging
import requests
from django.conf import settings

from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5


class DataService:
    """Remote bucket access with a local mirror"""

    def __init__(self, base_url=None, timeout=None, session=None, local_storage=None):
        self.base_url = base_url or getattr(settings, 'DATA_API_URL', 'http://127.0.0.1:8000/api/data')
        self.timeout = timeout or getattr(settings, 'DATA_API_TIMEOUT', DEFAULT_TIMEOUT)
        self.session = session or requests.Session()
        self.local_storage = local_storage or LocalStorage()

    def fetch_data(self, key: str, fallback=None):
        """
        Fetch the value stored under key.

        Returns the remote value, or fallback when the endpoint has nothing
        stored. If the endpoint cannot be reached the local mirror is read
        instead; a missing or unreadable mirror also yields fallback.
        """
        try:
            response = self.session.get(self.base_url, params={'key': key}, timeout=self.timeout)
            if not response.ok:
                raise requests.exceptions.HTTPError(f"Failed to fetch (status {response.status_code})")
            result = response.json()
            if not isinstance(result, dict) or result.get('exists') is False:
                return fallback
            data = result.get('data')
            return fallback if data is None else data
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Error fetching {key}: {str(e)}")
            return self._read_local(key, fallback)

    def save_data(self, key: str, data) -> bool:
        """
        Overwrite the bucket under key.

        The value is mirrored locally whatever the remote outcome. Returns
        True only if the remote write succeeded.
        """
        try:
            encoded = json.dumps(data)
        except (TypeError, ValueError) as e:
            logger.error(f"Error saving {key}: value is not JSON serializable ({str(e)})")
            return False

        saved = False
        try:
            response = self.session.post(
                self.base_url,
                json={'key': key, 'data': data},
                timeout=self.timeout
            )
            if not response.ok:
                raise requests.exceptions.HTTPError(f"Failed to save (status {response.status_code})")
            saved = True
        except requests.exceptions.RequestException as e:
            logger.error(f"Error saving {key}: {str(e)}")

        self._write_local(key, encoded)
        return saved

    def _read_local(self, key, fallback):
        try:
            stored = self.local_storage.get_item(key)
        except Exception as e:
            logger.error(f"Local storage read failed for {key}: {str(e)}")
            return fallback
        if not stored:
            return fallback
        try:
            return json.loads(stored)
        except (TypeError, ValueError):
            logger.warning(f"Malformed JSON in local storage for {key}, using fallback")
            return fallback

    def _write_local(self, key, encoded):
        try:
            self.local_storage.set_item(key, encoded)
        except Exception as e:
            logger.error(f"Local storage write failed for {key}: {str(e)}")


_default_service = None


def get_data_service() -> DataService:
    """Return the process-wide facade built from settings"""
    global _default_service
    if _default_service is None:
        _default_service = DataService()
    return _default_service


def fetch_data(key: str, fallback=None):
    return get_data_service().fetch_data(key, fallback)


def save_data(key: str, data) -> bool:
    return get_data_service().save_data(key, data)
