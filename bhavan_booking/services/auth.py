"""Authentication: login, registration, profile and startup session check."""

from __future__ import annotations

import logging
from typing import Optional

from bhavan_booking.api.client import ApiClient
from bhavan_booking.core.storage import SessionStore
from bhavan_booking.domain.entities import Session, UserProfile
from bhavan_booking.exceptions import ApiError, StorageError
from bhavan_booking.utils.validators import validate_login, validate_registration

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, client: ApiClient, store: SessionStore):
        self.client = client
        self.store = store

    def login(self, phone_number: str, password: str) -> Session:
        validate_login(phone_number, password)
        data = self.client.post(
            "/auth/login",
            json={"phoneNumber": phone_number.strip(), "password": password},
            fallback_message="Login failed",
        )
        session = self._session_from(data, "Login failed")
        self.store.save_session(session)
        logger.info("Login successful for %s", session.user.full_name or phone_number)
        return session

    def register(
        self,
        full_name: str,
        phone_number: str,
        password: str,
        email: Optional[str] = None,
        confirm_password: Optional[str] = None,
    ) -> Session:
        validate_registration(full_name, phone_number, password, confirm_password, email)
        payload = {
            "fullName": full_name.strip(),
            "phoneNumber": phone_number.strip(),
            "password": password,
        }
        # empty email is not sent at all
        if email and email.strip():
            payload["email"] = email.strip()

        data = self.client.post(
            "/auth/register", json=payload, fallback_message="Registration failed"
        )
        session = self._session_from(data, "Registration failed")
        self.store.save_session(session)
        logger.info("Registration successful for %s", session.user.full_name)
        return session

    def verify_token(self, token: str) -> UserProfile:
        data = self.client.get(
            "/auth/me",
            headers={"Authorization": f"Bearer {token}"},
            fallback_message="Token verification failed",
        )
        return UserProfile.from_api((data or {}).get("user"))

    def update_profile(self, **fields) -> UserProfile:
        """Send changed profile fields (``fullName``, ``email``...) and refresh the cache."""
        data = self.client.put(
            "/auth/update-profile", json=fields, fallback_message="Failed to update profile"
        )
        user = UserProfile.from_api((data or {}).get("user"))
        self.store.save_user(user)
        return user

    def restore_session(self) -> Optional[Session]:
        """
        Startup check. A stored token is verified with the backend; if that
        fails for any reason the token is discarded and None is returned
        instead of raising.
        """
        token = self.store.get_token()
        if not token:
            logger.info("No token found")
            return None

        logger.info("Found token, verifying with backend...")
        try:
            user = self.verify_token(token)
        except ApiError as e:
            logger.warning("Token verification failed: %s. Removing invalid token", e.message)
            self._drop_session()
            return None

        self.store.save_user(user)
        return Session(token=token, user=user)

    def logout(self) -> None:
        logger.info("Logout triggered")
        self.store.remove_token()
        self.store.remove_user()

    def _drop_session(self) -> None:
        try:
            self.store.remove_token()
        except StorageError:
            logger.exception("Could not remove invalid token")
        self.store.remove_user()

    @staticmethod
    def _session_from(data, fallback_message: str) -> Session:
        token = (data or {}).get("token")
        if not token:
            raise ApiError(fallback_message)
        return Session(token=token, user=UserProfile.from_api(data.get("user")))
