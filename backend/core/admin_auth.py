"""
Admin panel gate.

A single admin account and its session live in local storage, separate
from customer authentication. A session is {timestamp, username} and is
valid for ADMIN_SESSION_TTL_HOURS (24 by default); expiry is only checked
by load(), so a session that expires while in use stays authenticated
until the next load.

Passwords are stored with Django's salted hashers. Hashes written by the
old storefront (a 32-bit rolling hash in base 36) are still accepted and
are replaced with a salted hash on the next successful check.
"""
from enum import Enum
from django.conf import settings
from django.contrib.auth.hashers import check_password, identify_hasher, make_password
import json
import logging

from .local_storage import LocalStorage
from .utils import now_iso, now_ms

logger = logging.getLogger(__name__)

ADMIN_USER_KEY = 'adminUser'
ADMIN_SESSION_KEY = 'adminSession'

DEFAULT_ADMIN_USERNAME = 'admin'
DEFAULT_ADMIN_PASSWORD = 'admin123'

_BASE36 = '0123456789abcdefghijklmnopqrstuvwxyz'


class AuthState(Enum):
    UNAUTHENTICATED = 'unauthenticated'
    CHECKING_SESSION = 'checking_session'
    AUTHENTICATED = 'authenticated'


def legacy_hash(text: str) -> str:
    """
    Rolling 32-bit hash used by the old admin panel (not secure).

    Kept only to verify credentials stored before salted hashing.
    """
    value = 0
    encoded = text.encode('utf-16-le')
    for i in range(0, len(encoded), 2):
        code_unit = int.from_bytes(encoded[i:i + 2], 'little')
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    value = abs(value)

    if value == 0:
        return '0'
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


def session_ttl_ms() -> int:
    hours = getattr(settings, 'ADMIN_SESSION_TTL_HOURS', 24)
    return int(hours * 60 * 60 * 1000)


class AdminAuth:
    """Credential check and session state for the admin panel"""

    def __init__(self, local_storage=None, clock=None):
        self.local_storage = local_storage or LocalStorage()
        self.clock = clock or now_ms
        self.state = AuthState.UNAUTHENTICATED
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state == AuthState.CHECKING_SESSION

    def default_admin(self):
        return {
            'username': DEFAULT_ADMIN_USERNAME,
            'passwordHash': make_password(DEFAULT_ADMIN_PASSWORD),
            'createdAt': now_iso(),
        }

    def load(self):
        """Restore the admin user and check any stored session"""
        self.state = AuthState.CHECKING_SESSION

        stored_user = self._read_json(ADMIN_USER_KEY)
        if stored_user is None:
            if self.local_storage.get_item(ADMIN_USER_KEY) is None:
                # First run: create the default admin
                self.user = self.default_admin()
                self._write_json(ADMIN_USER_KEY, self.user)
                logger.info("Created default admin user")
            else:
                logger.error("Failed to parse admin user, using defaults")
                self.user = self.default_admin()
        else:
            self.user = stored_user

        self.state = AuthState.UNAUTHENTICATED
        session = self._read_json(ADMIN_SESSION_KEY)
        if session is not None:
            if self.session_is_valid(session):
                self.state = AuthState.AUTHENTICATED
            else:
                self.local_storage.remove_item(ADMIN_SESSION_KEY)
                logger.info("Admin session expired")
        return self.state

    def session_is_valid(self, session) -> bool:
        try:
            timestamp = int(session['timestamp'])
        except (KeyError, TypeError, ValueError):
            return False
        return self.clock() - timestamp < session_ttl_ms()

    def login(self, username: str, password: str) -> bool:
        admin_user = self._read_json(ADMIN_USER_KEY)
        if admin_user is None:
            return False

        if admin_user.get('username') != username or not self._verify(admin_user, password):
            logger.warning(f"Failed admin login for {username}")
            return False

        admin_user['lastLogin'] = now_iso()
        self._write_json(ADMIN_USER_KEY, admin_user)
        self._write_json(ADMIN_SESSION_KEY, {
            'timestamp': self.clock(),
            'username': username,
        })
        self.user = admin_user
        self.state = AuthState.AUTHENTICATED
        logger.info(f"Admin {username} logged in")
        return True

    def logout(self):
        self.local_storage.remove_item(ADMIN_SESSION_KEY)
        self.state = AuthState.UNAUTHENTICATED

    def change_password(self, current_password: str, new_password: str) -> bool:
        admin_user = self._read_json(ADMIN_USER_KEY)
        if admin_user is None or not self._verify(admin_user, current_password):
            return False

        admin_user['passwordHash'] = make_password(new_password)
        self._write_json(ADMIN_USER_KEY, admin_user)
        self.user = admin_user
        return True

    def update_username(self, new_username: str, password: str) -> bool:
        admin_user = self._read_json(ADMIN_USER_KEY)
        if admin_user is None or not self._verify(admin_user, password):
            return False

        admin_user['username'] = new_username
        self._write_json(ADMIN_USER_KEY, admin_user)
        self.user = admin_user
        return True

    def _verify(self, admin_user, password) -> bool:
        """Check password, upgrading a legacy hash in place on success"""
        stored = admin_user.get('passwordHash') or ''
        try:
            identify_hasher(stored)
        except ValueError:
            if legacy_hash(password) != stored:
                return False
            admin_user['passwordHash'] = make_password(password)
            self._write_json(ADMIN_USER_KEY, admin_user)
            logger.info("Upgraded legacy admin password hash")
            return True
        return check_password(password, stored)

    def _read_json(self, key):
        raw = self.local_storage.get_item(key)
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            logger.error(f"Failed to parse {key} from local storage")
            return None
        return value if isinstance(value, dict) else None

    def _write_json(self, key, value):
        self.local_storage.set_item(key, json.dumps(value))
