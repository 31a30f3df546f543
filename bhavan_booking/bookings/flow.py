"""
Booking orchestration.

Drives one booking from submitted guest details to a confirmed reservation:

    idle -> order_creating -> awaiting_payment -> verifying -> confirmed

Once create-order has succeeded the returned BookingOrder is held for the
life of the flow. Payment retries and repeated submits reopen checkout for
that order and never create a second one. Failures are kept in
``BookingFlow.error`` as a FlowError the UI can show directly.

``reset()`` bumps a generation counter; a call that returns after a reset
belongs to an older generation and its result is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from bhavan_booking.domain.entities import Booking, BookingOrder, GuestDetails, Package
from bhavan_booking.exceptions import ApiError, FlowStateError, PaymentGatewayError
from bhavan_booking.payments.razorpay_checkout import (
    GatewayMessage,
    build_checkout_options,
    describe_failure,
    parse_gateway_message,
    render_checkout_page,
)
from bhavan_booking.services.bookings import BookingService, OrderRequest
from bhavan_booking.utils.dates import DateInput, to_api_date
from bhavan_booking.utils.validators import validate_guest_details, validate_room_quantity

logger = logging.getLogger(__name__)

NO_LONGER_AVAILABLE = "no longer available"
NO_LONGER_AVAILABLE_MESSAGE = (
    "This package is no longer available for the selected dates. "
    "Please select different dates."
)
VERIFICATION_FAILED_TITLE = "Payment Verification Failed"
VERIFICATION_FAILED_MESSAGE = (
    "There was an error verifying your payment. Please contact support."
)


class FlowState(str, Enum):
    IDLE = "idle"
    ORDER_CREATING = "order_creating"
    AWAITING_PAYMENT = "awaiting_payment"
    VERIFYING = "verifying"
    CONFIRMED = "confirmed"


TRANSITIONS = {
    FlowState.IDLE: {FlowState.ORDER_CREATING},
    FlowState.ORDER_CREATING: {FlowState.AWAITING_PAYMENT, FlowState.IDLE},
    FlowState.AWAITING_PAYMENT: {FlowState.AWAITING_PAYMENT, FlowState.VERIFYING},
    FlowState.VERIFYING: {FlowState.CONFIRMED, FlowState.AWAITING_PAYMENT},
    FlowState.CONFIRMED: set(),
}


class FlowStep(str, Enum):
    ORDER = "order"
    PAYMENT = "payment"
    VERIFY = "verify"


@dataclass
class FlowError:
    title: str
    message: str
    step: FlowStep
    recoverable: bool = False


@dataclass
class BookingDraft:
    """Everything the guest entered before paying."""
    package: Package
    check_in: DateInput
    check_out: DateInput
    guest_details: GuestDetails
    room_quantity: Optional[int] = None
    number_of_guests: int = 1
    special_requests: str = ""

    def to_order_request(self) -> OrderRequest:
        """
        Validate locally and build the create-order payload.

        Raises ValidationError for bad guest details, dates, or a missing
        room count on ``rooms_only`` packages.
        """
        validate_guest_details(
            self.guest_details.full_name,
            self.guest_details.phone_number,
            self.guest_details.email,
        )
        quantity = validate_room_quantity(self.package.category, self.room_quantity)
        return OrderRequest(
            package_id=self.package.id,
            check_in=to_api_date(self.check_in, "checkInDate"),
            check_out=to_api_date(self.check_out, "checkOutDate"),
            guest_details=GuestDetails(
                full_name=self.guest_details.full_name.strip(),
                phone_number=self.guest_details.phone_number.strip(),
                email=self.guest_details.email.strip(),
            ),
            room_quantity=quantity,
            number_of_guests=self.number_of_guests,
            special_requests=self.special_requests.strip(),
        )


@dataclass
class CheckoutInvocation:
    order: BookingOrder
    options: dict
    html: str


class BookingFlow:
    def __init__(self, bookings: BookingService):
        self.bookings = bookings
        self.state = FlowState.IDLE
        self.error: Optional[FlowError] = None
        self.draft: Optional[BookingDraft] = None
        self.order: Optional[BookingOrder] = None
        self.booking: Optional[Booking] = None
        self.generation = 0
        self._pending_payment: Optional[GatewayMessage] = None

    def _transition(self, target: FlowState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise FlowStateError(
                f"Cannot move booking flow from {self.state.value} to {target.value}"
            )
        logger.info("Booking flow: %s -> %s", self.state.value, target.value)
        self.state = target

    def _is_stale(self, generation: int, what: str) -> bool:
        if generation != self.generation:
            logger.warning("Ignoring stale %s response (generation %s, now %s)",
                           what, generation, self.generation)
            return True
        return False

    def _checkout(self) -> CheckoutInvocation:
        options = build_checkout_options(
            self.order,
            self.order.guest_details or (self.draft.guest_details if self.draft else None),
            self.draft.package.name if self.draft else "",
        )
        return CheckoutInvocation(order=self.order, options=options, html=render_checkout_page(options))

    @property
    def has_order(self) -> bool:
        return self.order is not None

    def submit(self, draft: BookingDraft) -> Optional[CheckoutInvocation]:
        """
        Create the order and open checkout.

        Local validation errors are raised before anything is sent. Server
        and network failures are stored in ``self.error`` and None is returned.
        While an order is held no request is made at all.
        """
        if self.order is not None:
            if self.state != FlowState.AWAITING_PAYMENT:
                raise FlowStateError(f"Cannot submit while {self.state.value}")
            logger.info("Reusing held order %s", self.order.payment.order_id)
            return self.retry_payment()
        if self.state != FlowState.IDLE:
            raise FlowStateError(f"Cannot submit while {self.state.value}")

        request = draft.to_order_request()
        self.draft = draft
        self.error = None
        generation = self.generation
        self._transition(FlowState.ORDER_CREATING)

        try:
            order = self.bookings.create_order(request)
        except ApiError as e:
            if self._is_stale(generation, "create-order"):
                return None
            logger.error("Order creation failed: %s", e.message)
            message = e.message
            if NO_LONGER_AVAILABLE in message.lower():
                message = NO_LONGER_AVAILABLE_MESSAGE
            self.error = FlowError(
                "Order Creation Failed", message, FlowStep.ORDER, recoverable=e.recoverable
            )
            self._transition(FlowState.IDLE)
            return None

        if self._is_stale(generation, "create-order"):
            return None
        self.order = order
        self._transition(FlowState.AWAITING_PAYMENT)
        return self._checkout()

    def retry_payment(self) -> CheckoutInvocation:
        """Reopen checkout for the held order."""
        if self.order is None or self.state != FlowState.AWAITING_PAYMENT:
            raise FlowStateError("No order is awaiting payment")
        self.error = None
        self._transition(FlowState.AWAITING_PAYMENT)
        return self._checkout()

    def handle_gateway_message(self, raw: Union[str, bytes, dict]) -> Optional[Booking]:
        """
        Process a message posted by the checkout page.

        Returns the confirmed Booking on a verified payment, otherwise None
        with ``self.error`` describing what the guest should see.
        """
        if self.order is None:
            logger.warning("Payment message received with no order held, ignoring")
            return None
        if self.state != FlowState.AWAITING_PAYMENT:
            raise FlowStateError(f"Unexpected payment message while {self.state.value}")

        try:
            message = parse_gateway_message(raw)
        except PaymentGatewayError as e:
            logger.error("Bad payment message: %s", e.message)
            self.error = FlowError(
                VERIFICATION_FAILED_TITLE, VERIFICATION_FAILED_MESSAGE, FlowStep.PAYMENT
            )
            return None

        if not message.is_success:
            title, text = describe_failure(message)
            logger.info("Payment not completed: %s (%s)", message.type, message.error_reason)
            self.error = FlowError(title, text, FlowStep.PAYMENT, recoverable=True)
            self._transition(FlowState.AWAITING_PAYMENT)
            return None

        if message.order_id != self.order.payment.order_id:
            logger.warning(
                "Payment for order %s does not match held order %s",
                message.order_id,
                self.order.payment.order_id,
            )
            self.error = FlowError(
                VERIFICATION_FAILED_TITLE, VERIFICATION_FAILED_MESSAGE, FlowStep.PAYMENT
            )
            return None

        logger.info("Payment successful: %s", message.payment_id)
        return self._verify(message)

    def _verify(self, message: GatewayMessage) -> Optional[Booking]:
        if self.state != FlowState.VERIFYING:
            self._transition(FlowState.VERIFYING)
        self.error = None
        self._pending_payment = message
        generation = self.generation

        try:
            booking = self.bookings.verify_payment(
                self.order.booking_id,
                message.order_id,
                message.payment_id,
                message.signature,
            )
        except ApiError as e:
            if self._is_stale(generation, "verify-payment"):
                return None
            logger.error("Payment verification failed: %s", e.message)
            if e.recoverable:
                # stays in verifying so retry() can resend the same payment
                self.error = FlowError(
                    VERIFICATION_FAILED_TITLE, e.message, FlowStep.VERIFY, recoverable=True
                )
            else:
                self.error = FlowError(VERIFICATION_FAILED_TITLE, e.message, FlowStep.VERIFY)
                self._pending_payment = None
                self._transition(FlowState.AWAITING_PAYMENT)
            return None

        if self._is_stale(generation, "verify-payment"):
            return None
        self._pending_payment = None
        self.booking = booking
        self._transition(FlowState.CONFIRMED)
        return booking

    def retry(self) -> Union[CheckoutInvocation, Booking, None]:
        """Repeat the step that failed with a network or timeout error."""
        if self.error is None or not self.error.recoverable:
            raise FlowStateError("Nothing to retry")
        if self.error.step == FlowStep.ORDER:
            return self.submit(self.draft)
        if self.error.step == FlowStep.VERIFY:
            return self._verify(self._pending_payment)
        return self.retry_payment()

    def reset(self) -> None:
        logger.info("Booking flow reset from %s", self.state.value)
        self.generation += 1
        self.state = FlowState.IDLE
        self.error = None
        self.draft = None
        self.order = None
        self.booking = None
        self._pending_payment = None
