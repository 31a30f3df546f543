"""The guest's bookings list with cancellation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from bhavan_booking.domain.entities import Booking
from bhavan_booking.exceptions import ApiError
from bhavan_booking.services.bookings import BookingService

logger = logging.getLogger(__name__)

ALREADY_CANCELLED = "This booking is already cancelled"


@dataclass
class CancelOutcome:
    success: bool
    message: str
    booking: Optional[Booking] = None


class BookingsHistory:
    def __init__(self, bookings: BookingService):
        self.bookings = bookings
        self.items: list[Booking] = []
        self.error: Optional[str] = None

    def refresh(self, status: Optional[str] = None) -> list[Booking]:
        """Reload from the server. On failure the previous list is kept."""
        try:
            self.items = self.bookings.fetch_my_bookings(status)
            self.error = None
        except ApiError as e:
            logger.error("Error loading bookings: %s", e.message)
            self.error = e.message
        return self.items

    def get(self, booking_id: str) -> Optional[Booking]:
        return next((b for b in self.items if b.id == booking_id), None)

    def cancel(self, booking_id: str, reason: Optional[str] = None) -> CancelOutcome:
        """
        Cancel through the server and update the local entry.

        A booking already cancelled in the list is not sent again. A failed
        call leaves the local list untouched and reports the message.
        """
        current = self.get(booking_id)
        if current is not None and current.is_cancelled:
            logger.info("Booking %s already cancelled, not sending again", booking_id)
            return CancelOutcome(success=False, message=ALREADY_CANCELLED, booking=current)

        try:
            updated = self.bookings.cancel_booking(booking_id, reason)
        except ApiError as e:
            logger.warning("Cancel of booking %s failed: %s", booking_id, e.message)
            return CancelOutcome(success=False, message=e.message, booking=current)

        self.items = [updated if b.id == booking_id else b for b in self.items]
        return CancelOutcome(
            success=True, message="Booking cancelled successfully", booking=updated
        )
