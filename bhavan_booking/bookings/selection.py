"""
Booking selection step.

Takes a package, a date range and (for ``rooms_only``) a room count, checks
availability with the server and produces the quote the guest confirms
before entering guest details.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from bhavan_booking.domain.entities import Availability, Package, PricingBreakdown
from bhavan_booking.domain.value_objects import DateRange
from bhavan_booking.exceptions import NotAvailableError, ValidationError
from bhavan_booking.services.bookings import BookingService
from bhavan_booking.utils.dates import DateInput, parse_date, to_api_date
from bhavan_booking.utils.validators import validate_room_quantity

logger = logging.getLogger(__name__)

INCOMPLETE_SELECTION = "Please select a category and dates."
NOT_AVAILABLE_MESSAGE = "This package is not available for the selected dates."


@dataclass
class Quote:
    package: Package
    dates: DateRange
    pricing: PricingBreakdown
    check_in: str
    check_out: str
    room_quantity: Optional[int] = None
    availability: Optional[Availability] = None

    @property
    def nights(self) -> int:
        return self.dates.nights


def select_dates(check_in: Optional[DateInput], check_out: Optional[DateInput]) -> DateRange:
    if not check_in or not check_out:
        errors = {}
        if not check_in:
            errors["checkInDate"] = "Check-in date is required"
        if not check_out:
            errors["checkOutDate"] = "Check-out date is required"
        raise ValidationError(errors, message=INCOMPLETE_SELECTION)

    start = parse_date(check_in, "checkInDate")
    end = parse_date(check_out, "checkOutDate")
    if end <= start:
        raise ValidationError(
            {"checkOutDate": "Check-out date must be after check-in date"},
            message="Check-out date must be after check-in date",
        )
    return DateRange(start, end)


class BookingSelection:
    def __init__(self, bookings: BookingService):
        self.bookings = bookings

    def quote(
        self,
        package: Optional[Package],
        check_in: Optional[DateInput],
        check_out: Optional[DateInput],
        room_quantity: Optional[int] = None,
    ) -> Quote:
        """
        Validate the selection locally, then ask the server.

        Raises:
            ValidationError: missing category or dates, bad order of dates,
                or no room count for a ``rooms_only`` package. Nothing is sent.
            NotAvailableError: the server answered ``available: false``.
            ApiError: the availability call itself failed.
        """
        if package is None or not package.category:
            raise ValidationError({"category": "Category is required"}, message=INCOMPLETE_SELECTION)
        dates = select_dates(check_in, check_out)
        quantity = validate_room_quantity(package.category, room_quantity)
        # sent as the caller wrote them; the range is only for checks and nights
        api_check_in = to_api_date(check_in, "checkInDate")
        api_check_out = to_api_date(check_out, "checkOutDate")

        availability = self.bookings.check_availability(
            package.id,
            api_check_in,
            api_check_out,
            room_quantity=quantity,
            package_pricing=package.pricing,
        )
        if not availability.available:
            logger.info("Package %s not available for %s", package.id, dates)
            raise NotAvailableError(NOT_AVAILABLE_MESSAGE)

        pricing = availability.pricing if availability.raw.get("pricing") else None
        pricing = pricing or PricingBreakdown.estimate(
            package.pricing.base_price,
            dates.nights,
            package.pricing.gst_percentage,
            quantity,
        )
        return Quote(
            package=package,
            dates=dates,
            pricing=pricing,
            check_in=api_check_in,
            check_out=api_check_out,
            room_quantity=quantity,
            availability=availability,
        )
