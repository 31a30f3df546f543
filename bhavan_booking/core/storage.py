# bhavan_booking/core/storage.py: local session store (token, profile, onboarding flag)

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from bhavan_booking import settings
from bhavan_booking.core.security import EncryptionService
from bhavan_booking.domain.entities import Session, UserProfile
from bhavan_booking.exceptions import StorageError

logger = logging.getLogger(__name__)


def _storage_keys(prefix: str) -> dict:
    return {
        "HAS_SEEN_WELCOME": f"{prefix}has_seen_welcome",
        "USER_TOKEN": f"{prefix}user_token",
        "USER_PROFILE": f"{prefix}user_profile",
    }


class MemoryBackend:
    """Keeps values in a dict. Used by tests and short-lived scripts."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JSONFileBackend:
    """Key/value strings in a single JSON document on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as e:
            logger.error(f"Corrupted session file {self.path}, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Corrupted session file {self.path}, starting empty")
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".session-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class SessionStore:
    """
    Persists the auth token, the cached user profile and the onboarding flag.

    Reads never raise: a failing read is logged and treated as "absent".
    Saving or removing the token propagates failures as StorageError, since
    the caller cannot continue a login/logout without them. The remaining
    writes only log.
    """

    def __init__(self, backend=None, encryption_key=None, prefix=None):
        if backend is None:
            backend = JSONFileBackend(settings.SESSION_STORE_PATH)
        self.backend = backend
        self.keys = _storage_keys(prefix or settings.STORAGE_KEY_PREFIX)
        if encryption_key is None:
            encryption_key = settings.SESSION_ENCRYPTION_KEY
        self._crypto = EncryptionService(encryption_key) if encryption_key else None

    # ---------- onboarding ----------

    def is_first_time_user(self) -> bool:
        try:
            return self.backend.get_item(self.keys["HAS_SEEN_WELCOME"]) is None
        except Exception as e:
            logger.error(f"Error checking first time user: {e}")
            return False

    def mark_welcome_seen(self) -> None:
        try:
            self.backend.set_item(self.keys["HAS_SEEN_WELCOME"], "true")
        except Exception as e:
            logger.error(f"Error marking welcome as seen: {e}")

    def reset_first_time_status(self) -> None:
        try:
            self.backend.remove_item(self.keys["HAS_SEEN_WELCOME"])
            logger.info("First time status reset - welcome will be shown again")
        except Exception as e:
            logger.error(f"Error resetting first time status: {e}")

    # ---------- token ----------

    def save_token(self, token: str) -> None:
        try:
            value = self._crypto.encrypt(token) if self._crypto else token
            self.backend.set_item(self.keys["USER_TOKEN"], value)
        except Exception as e:
            logger.error(f"Error saving token: {e}")
            raise StorageError("Could not save the session token") from e

    def get_token(self) -> Optional[str]:
        try:
            value = self.backend.get_item(self.keys["USER_TOKEN"])
        except Exception as e:
            logger.error(f"Error getting token: {e}")
            return None
        if not value:
            return None
        if self._crypto:
            return self._crypto.decrypt(value) or None
        return value

    def remove_token(self) -> None:
        try:
            self.backend.remove_item(self.keys["USER_TOKEN"])
        except Exception as e:
            logger.error(f"Error removing token: {e}")
            raise StorageError("Could not remove the session token") from e

    # ---------- user profile ----------

    def save_user(self, user: UserProfile) -> None:
        try:
            self.backend.set_item(self.keys["USER_PROFILE"], json.dumps(user.to_dict()))
        except Exception as e:
            logger.error(f"Error saving user: {e}")

    def get_user(self) -> Optional[UserProfile]:
        try:
            raw = self.backend.get_item(self.keys["USER_PROFILE"])
            if not raw:
                return None
            return UserProfile.from_api(json.loads(raw))
        except Exception as e:
            logger.error(f"Error getting user: {e}")
            return None

    def remove_user(self) -> None:
        try:
            self.backend.remove_item(self.keys["USER_PROFILE"])
        except Exception as e:
            logger.error(f"Error removing user: {e}")

    # ---------- combined ----------

    def save_session(self, session: Session) -> None:
        self.save_token(session.token)
        self.save_user(session.user)

    def get_session(self) -> Optional[Session]:
        token = self.get_token()
        if not token:
            return None
        return Session(token=token, user=self.get_user() or UserProfile())

    def clear_all(self) -> None:
        """Drop every stored value (diagnostics and tests)."""
        try:
            self.backend.clear()
            logger.info("All storage cleared")
        except Exception as e:
            logger.error(f"Error clearing storage: {e}")
