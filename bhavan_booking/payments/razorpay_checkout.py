"""
Razorpay Checkout glue.

Builds the options for the hosted checkout widget, renders the page that
embeds it, and parses the JSON messages the page posts back:

    {"type": "success", "razorpay_order_id", "razorpay_payment_id", "razorpay_signature"}
    {"type": "error", "error": {"code", "reason", "description", ...}}
    {"type": "dismissed", "message"}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from bhavan_booking import settings
from bhavan_booking.domain.entities import BookingOrder, GuestDetails
from bhavan_booking.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

MESSAGE_SUCCESS = "success"
MESSAGE_ERROR = "error"
MESSAGE_DISMISSED = "dismissed"

INTERNATIONAL_CARD_REASON = "international_transaction_not_allowed"
TEST_CARD_GUIDANCE = (
    "International cards not enabled. Use Indian test card:\n\n"
    "5267 3181 8797 5449\nCVV: 123\nExpiry: 12/25"
)
GENERIC_FAILURE = "Payment could not be completed."
DISMISSED_MESSAGE = "You cancelled the payment. Would you like to try again?"


def contact_number(phone_number: str) -> str:
    phone_number = (phone_number or "").strip()
    if phone_number.startswith("+"):
        return phone_number
    return f"{settings.PHONE_COUNTRY_CODE}{phone_number}"


def build_checkout_options(
    order: BookingOrder,
    guest: Optional[GuestDetails] = None,
    package_name: str = "",
) -> dict:
    """Options object handed to ``new Razorpay(options)``."""
    guest = guest or order.guest_details or GuestDetails(full_name="", phone_number="")
    return {
        "key": order.payment.key or settings.RAZORPAY_KEY_ID,
        "amount": order.payment.amount,
        "currency": order.payment.currency,
        "name": settings.VENUE_NAME,
        "description": "Booking Payment",
        "order_id": order.payment.order_id,
        "prefill": {
            "name": guest.full_name,
            "email": guest.email,
            "contact": contact_number(guest.phone_number) if guest.phone_number else "",
        },
        "notes": {
            "bookingId": order.booking_id,
            "packageName": package_name,
        },
        "theme": {"color": settings.CHECKOUT_THEME_COLOR},
    }


def _js_literal(value) -> str:
    # keeps "</script>" inside strings from closing the tag
    return json.dumps(value).replace("</", "<\\/")


CHECKOUT_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <script src="{script}"></script>
</head>
<body>
  <div class="loading">Opening Payment Gateway...</div>
  <script>
    var post = function (payload) {{
      window.ReactNativeWebView.postMessage(JSON.stringify(payload));
    }};
    var options = {options};
    options.handler = function (response) {{
      post({{
        type: "success",
        razorpay_order_id: response.razorpay_order_id,
        razorpay_payment_id: response.razorpay_payment_id,
        razorpay_signature: response.razorpay_signature
      }});
    }};
    options.modal = {{
      ondismiss: function () {{
        post({{type: "dismissed", message: "Payment cancelled by user"}});
      }}
    }};
    var rzp = new Razorpay(options);
    rzp.on("payment.failed", function (response) {{
      post({{type: "error", error: response.error}});
    }});
    setTimeout(function () {{ rzp.open(); }}, 500);
  </script>
</body>
</html>
"""


def render_checkout_page(options: dict) -> str:
    return CHECKOUT_PAGE.format(
        script=settings.RAZORPAY_CHECKOUT_SCRIPT,
        options=_js_literal(options),
    )


@dataclass
class GatewayMessage:
    type: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    error_code: Optional[str] = None
    error_reason: Optional[str] = None
    error_description: Optional[str] = None
    message: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_success(self) -> bool:
        return self.type == MESSAGE_SUCCESS

    @property
    def is_error(self) -> bool:
        return self.type == MESSAGE_ERROR

    @property
    def is_dismissed(self) -> bool:
        return self.type == MESSAGE_DISMISSED


def parse_gateway_message(raw: Union[str, bytes, dict]) -> GatewayMessage:
    """Decode a message posted by the checkout page.

    Raises PaymentGatewayError when the payload is not JSON, has an unknown
    ``type``, or a success message lacks any of the three Razorpay fields.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PaymentGatewayError("Malformed payment response") from e
    else:
        data = raw
    if not isinstance(data, dict):
        raise PaymentGatewayError("Malformed payment response")

    kind = data.get("type")
    if kind == MESSAGE_SUCCESS:
        msg = GatewayMessage(
            type=kind,
            order_id=data.get("razorpay_order_id"),
            payment_id=data.get("razorpay_payment_id"),
            signature=data.get("razorpay_signature"),
            raw=data,
        )
        if not (msg.order_id and msg.payment_id and msg.signature):
            raise PaymentGatewayError("Incomplete payment response")
        return msg

    if kind == MESSAGE_ERROR:
        error = data.get("error") or {}
        if not isinstance(error, dict):
            error = {"description": str(error)}
        return GatewayMessage(
            type=kind,
            error_code=error.get("code"),
            error_reason=error.get("reason"),
            error_description=error.get("description"),
            raw=data,
        )

    if kind == MESSAGE_DISMISSED:
        return GatewayMessage(type=kind, message=data.get("message"), raw=data)

    logger.warning("Unknown payment message type: %r", kind)
    raise PaymentGatewayError(f"Unknown payment response type: {kind!r}")


def describe_failure(msg: GatewayMessage) -> tuple[str, str]:
    """Title and text shown to the guest for an ``error`` or ``dismissed`` message."""
    if msg.is_dismissed:
        return "Payment Cancelled", DISMISSED_MESSAGE
    if msg.error_reason == INTERNATIONAL_CARD_REASON:
        return "Card Not Supported", TEST_CARD_GUIDANCE
    return "Payment Failed", msg.error_description or GENERIC_FAILURE
