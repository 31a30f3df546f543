"""Booking endpoints: availability, order creation, payment verification, history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from bhavan_booking.api.client import ApiClient
from bhavan_booking.domain.entities import (
    Availability,
    Booking,
    BookingOrder,
    BookingStatus,
    GuestDetails,
    PackagePricing,
    PaymentStatus,
)
from bhavan_booking.exceptions import ServerError
from bhavan_booking.utils.dates import DateInput, nights_between, to_api_date

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = "Cancelled by user"


@dataclass
class OrderRequest:
    package_id: str
    check_in: DateInput
    check_out: DateInput
    guest_details: GuestDetails
    room_quantity: Optional[int] = None
    number_of_guests: int = 1
    special_requests: str = ""

    def to_api(self) -> dict:
        payload = {
            "packageId": self.package_id,
            "checkInDate": to_api_date(self.check_in, "checkInDate"),
            "checkOutDate": to_api_date(self.check_out, "checkOutDate"),
            "numberOfGuests": self.number_of_guests,
            "guestDetails": self.guest_details.to_api(),
            "specialRequests": self.special_requests,
        }
        if self.room_quantity:
            payload["roomQuantity"] = self.room_quantity
        return payload


class BookingService:
    def __init__(self, client: ApiClient):
        self.client = client

    def check_availability(
        self,
        package_id: str,
        check_in: DateInput,
        check_out: DateInput,
        room_quantity: Optional[int] = None,
        package_pricing: Optional[PackagePricing] = None,
    ) -> Availability:
        payload = {
            "packageId": package_id,
            "checkInDate": to_api_date(check_in, "checkInDate"),
            "checkOutDate": to_api_date(check_out, "checkOutDate"),
        }
        if room_quantity:
            payload["roomQuantity"] = room_quantity

        logger.info(
            "Checking availability for package %s: %s - %s",
            package_id,
            payload["checkInDate"],
            payload["checkOutDate"],
        )
        data = self.client.post(
            "/bookings/check-availability",
            json=payload,
            fallback_message="Failed to check availability",
        )
        availability = Availability.from_api(
            data or {}, package_pricing, nights_between(check_in, check_out)
        )
        logger.info("Availability: %s", "Available" if availability.available else "Not Available")
        return availability

    def create_order(self, request: OrderRequest) -> BookingOrder:
        """Step 1 of payment: creates a pending booking and its Razorpay order."""
        payload = request.to_api()
        logger.info("Creating booking order for package %s", request.package_id)
        data = self.client.post(
            "/bookings/create-order",
            json=payload,
            fallback_message="Failed to create booking order",
        )
        try:
            order = BookingOrder.from_api(data or {})
        except ValueError as e:
            raise ServerError("Failed to create booking order") from e

        order.package_id = request.package_id
        order.check_in_date = order.check_in_date or payload["checkInDate"]
        order.check_out_date = order.check_out_date or payload["checkOutDate"]
        order.guest_details = request.guest_details
        order.room_quantity = request.room_quantity
        logger.info(
            "Order created: booking %s, razorpay order %s, amount %s",
            order.booking_id,
            order.payment.order_id,
            order.payment.amount,
        )
        return order

    def verify_payment(
        self,
        booking_id: str,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> Booking:
        """Step 2 of payment: the server checks the signature and confirms the booking."""
        logger.info("Verifying payment for booking %s (order %s)", booking_id, razorpay_order_id)
        data = self.client.post(
            "/bookings/verify-payment",
            json={
                "bookingId": booking_id,
                "razorpay_order_id": razorpay_order_id,
                "razorpay_payment_id": razorpay_payment_id,
                "razorpay_signature": razorpay_signature,
            },
            fallback_message="Payment verification failed",
        )
        booking = Booking.from_api((data or {}).get("booking") or (data or {}).get("data") or {})
        if not booking.id:
            booking.id = booking_id
        if "status" not in booking.raw:
            booking.status = BookingStatus.CONFIRMED
            booking.payment_status = PaymentStatus.PAID
        logger.info("Payment verified, booking %s confirmed", booking.reference or booking.id)
        return booking

    def fetch_my_bookings(self, status: Optional[str] = None) -> list[Booking]:
        data = self.client.get(
            "/bookings/my-bookings",
            params={"status": status},
            fallback_message="Failed to fetch bookings",
        )
        bookings = [Booking.from_api(b) for b in data.get("data") or []]
        logger.info("Bookings fetched: %s", data.get("count", len(bookings)))
        return bookings

    def fetch_booking(self, booking_id: str) -> Booking:
        data = self.client.get(
            f"/bookings/{booking_id}",
            fallback_message="Failed to fetch booking details",
            status_messages={
                404: "Booking not found",
                403: "Unauthorized access to this booking",
            },
        )
        return Booking.from_api(data.get("data") or {})

    def cancel_booking(self, booking_id: str, reason: Optional[str] = None) -> Booking:
        logger.info("Cancelling booking %s", booking_id)
        data = self.client.post(
            f"/bookings/{booking_id}/cancel",
            json={"reason": reason or DEFAULT_CANCEL_REASON},
            fallback_message="Failed to cancel booking",
            status_messages={403: "Unauthorized to cancel this booking"},
        )
        booking = Booking.from_api((data or {}).get("data") or {})
        if not booking.id:
            booking.id = booking_id
        if "status" not in booking.raw:
            booking.status = BookingStatus.CANCELLED
        logger.info("Booking %s cancelled successfully", booking_id)
        return booking
