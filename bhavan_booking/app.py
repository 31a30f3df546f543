"""
Composition root.

BookingApp owns one session store and one API client and hands them to the
services, the way a UI layer would hold them for the lifetime of the app.
"""

from __future__ import annotations

import logging
from typing import Optional

from bhavan_booking import settings
from bhavan_booking.api.client import ApiClient
from bhavan_booking.bookings.flow import BookingFlow
from bhavan_booking.bookings.history import BookingsHistory
from bhavan_booking.bookings.selection import BookingSelection
from bhavan_booking.core.storage import SessionStore
from bhavan_booking.domain.entities import Session
from bhavan_booking.services.auth import AuthService
from bhavan_booking.services.bookings import BookingService
from bhavan_booking.services.packages import PackageService
from bhavan_booking.services.resources import ResourceService

logger = logging.getLogger(__name__)


class BookingApp:
    def __init__(
        self,
        store: Optional[SessionStore] = None,
        client: Optional[ApiClient] = None,
        base_url: Optional[str] = None,
        setup_logging: bool = True,
    ):
        if setup_logging:
            settings.configure_logging()
        self.store = store or SessionStore()
        self.client = client or ApiClient(
            base_url=base_url or settings.API_BASE_URL,
            token_provider=self.store.get_token,
        )
        self.auth = AuthService(self.client, self.store)
        self.packages = PackageService(self.client)
        self.resources = ResourceService(self.client)
        self.bookings = BookingService(self.client)
        self.session: Optional[Session] = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    def startup(self) -> bool:
        """Restore a stored session. Returns True when the guest is signed in."""
        self.session = self.auth.restore_session()
        logger.info("Startup: %s", "authenticated" if self.session else "signed out")
        return self.session is not None

    def is_first_time_user(self) -> bool:
        return self.store.is_first_time_user()

    def mark_welcome_seen(self) -> None:
        self.store.mark_welcome_seen()

    def login(self, phone_number: str, password: str) -> Session:
        self.session = self.auth.login(phone_number, password)
        return self.session

    def register(self, full_name: str, phone_number: str, password: str, **kwargs) -> Session:
        self.session = self.auth.register(full_name, phone_number, password, **kwargs)
        return self.session

    def logout(self) -> None:
        self.auth.logout()
        self.session = None

    def booking_selection(self) -> BookingSelection:
        return BookingSelection(self.bookings)

    def new_booking_flow(self) -> BookingFlow:
        return BookingFlow(self.bookings)

    def bookings_history(self) -> BookingsHistory:
        return BookingsHistory(self.bookings)

    def close(self) -> None:
        self.client.close()
