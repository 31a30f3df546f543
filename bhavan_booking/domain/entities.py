"""
Booking Domain Entities

Client-side views of the records the booking API returns:
- UserProfile / Session: the authenticated guest
- Package / IncludedResource / Resource: read-only venue offerings
- PricingBreakdown / Availability: quotes for a date range
- PaymentOrder / BookingOrder: a draft booking waiting for payment
- Booking: a finalized reservation with its BookingStatus

Every entity is built with ``from_api`` from the camelCase JSON the server
sends and keeps the original payload in ``raw``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from bhavan_booking.domain.value_objects import Money

DEFAULT_GST_PERCENTAGE = 18
GUEST_ROOM = "guest_room"


class PackageCategory(str, Enum):
    FULL_VENUE = "full_venue"
    FUNCTION_HALL_DINING = "function_hall_dining"
    ROOMS_DINING_MINI_HALL = "rooms_dining_mini_hall"
    ROOMS_MINI_HALL = "rooms_mini_hall"
    FUNCTION_HALL_ONLY = "function_hall_only"
    MINI_HALL = "mini_hall"
    ROOMS_ONLY = "rooms_only"


class BookingStatus(str, Enum):
    """
    Booking lifecycle as reported by the server

    - PENDING -> CONFIRMED (payment verified)
    - PENDING -> CANCELLED
    - CONFIRMED -> CHECKED_IN -> CHECKED_OUT
    - CONFIRMED -> CANCELLED
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Optional[str]) -> "BookingStatus":
        try:
            return cls((value or cls.PENDING.value).lower())
        except ValueError:
            return cls.PENDING


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    @classmethod
    def parse(cls, value: Optional[str]) -> "PaymentStatus":
        try:
            return cls((value or cls.PENDING.value).lower())
        except ValueError:
            return cls.PENDING


def _id_of(data: dict) -> Optional[str]:
    value = data.get("_id") or data.get("id")
    return str(value) if value is not None else None


@dataclass
class UserProfile:
    full_name: str = ""
    phone_number: str = ""
    email: str = ""
    id: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "UserProfile":
        data = data or {}
        return cls(
            full_name=data.get("fullName") or "",
            phone_number=data.get("phoneNumber") or "",
            email=data.get("email") or "",
            id=_id_of(data),
            raw=dict(data),
        )

    @property
    def local_phone_number(self) -> str:
        """Phone number without the +91 prefix, as guests type it."""
        number = self.phone_number or ""
        return number[3:] if number.startswith("+91") else number

    def to_dict(self) -> dict:
        data = {
            "fullName": self.full_name,
            "phoneNumber": self.phone_number,
            "email": self.email,
        }
        if self.id:
            data["_id"] = self.id
        return data


@dataclass
class Session:
    token: str
    user: UserProfile = field(default_factory=UserProfile)


@dataclass
class GuestDetails:
    full_name: str
    phone_number: str
    email: str = ""

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "GuestDetails":
        data = data or {}
        return cls(
            full_name=data.get("fullName") or "",
            phone_number=data.get("phoneNumber") or "",
            email=data.get("email") or "",
        )

    def to_api(self) -> dict:
        return {
            "fullName": self.full_name,
            "phoneNumber": self.phone_number,
            "email": self.email,
        }


@dataclass
class PackagePricing:
    base_price: Money
    gst_percentage: int = DEFAULT_GST_PERCENTAGE

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "PackagePricing":
        data = data or {}
        return cls(
            base_price=Money(data.get("basePrice") or 0),
            gst_percentage=data.get("gstPercentage") or DEFAULT_GST_PERCENTAGE,
        )


@dataclass
class IncludedResource:
    resource_id: Optional[str]
    name: str
    facility_type: str
    quantity: int = 1
    is_flexible: bool = False
    base_price: Optional[Money] = None

    @classmethod
    def from_api(cls, data: dict) -> "IncludedResource":
        resource = data.get("resource") or {}
        if not isinstance(resource, dict):
            # unpopulated reference
            resource = {"_id": resource}
        base_price = resource.get("basePrice")
        return cls(
            resource_id=_id_of(resource),
            name=resource.get("name") or "",
            facility_type=resource.get("facilityType") or "",
            quantity=int(data.get("quantity") or 0),
            is_flexible=bool(data.get("isFlexible")),
            base_price=Money(base_price) if base_price is not None else None,
        )


@dataclass
class Package:
    id: str
    name: str
    category: str
    pricing: PackagePricing
    description: str = ""
    resources: list[IncludedResource] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict) -> "Package":
        includes = data.get("includes") or {}
        return cls(
            id=_id_of(data) or "",
            name=data.get("name") or "",
            category=data.get("category") or "",
            pricing=PackagePricing.from_api(data.get("pricing")),
            description=data.get("shortDescription") or data.get("description") or "",
            resources=[IncludedResource.from_api(r) for r in includes.get("resources") or []],
            images=list(data.get("images") or []),
            raw=dict(data),
        )

    @property
    def requires_room_quantity(self) -> bool:
        return self.category == PackageCategory.ROOMS_ONLY.value

    @property
    def rooms_count(self) -> int:
        return sum(r.quantity for r in self.resources if r.facility_type == GUEST_ROOM)

    @property
    def display_name(self) -> str:
        return self.name.replace(" Booking", "").replace(" Package", "")


@dataclass
class Resource:
    id: str
    name: str
    facility_type: str
    category: str = ""
    capacity: int = 0
    base_price: Optional[Money] = None
    total_units: int = 0
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict) -> "Resource":
        base_price = data.get("basePrice")
        return cls(
            id=_id_of(data) or "",
            name=data.get("name") or "",
            facility_type=data.get("facilityType") or "",
            category=data.get("category") or "",
            capacity=int(data.get("capacity") or 0),
            base_price=Money(base_price) if base_price is not None else None,
            total_units=int(data.get("totalUnits") or 0),
            raw=dict(data),
        )


@dataclass
class PricingBreakdown:
    base_price: Money
    nights: int
    subtotal: Money
    gst_percentage: int
    gst_amount: Money
    final_amount: Money
    convenience_fee: Money = field(default_factory=lambda: Money(0))
    room_quantity: Optional[int] = None

    @classmethod
    def estimate(
        cls,
        base_price: Money,
        nights: int,
        gst_percentage: int = DEFAULT_GST_PERCENTAGE,
        room_quantity: Optional[int] = None,
    ) -> "PricingBreakdown":
        """Local quote: base × nights (× rooms) plus GST rounded to whole rupees."""
        nights = max(int(nights or 1), 1)
        units = nights * (room_quantity or 1)
        subtotal = base_price * units
        gst_amount = subtotal.percentage(gst_percentage)
        fee = Money(0, base_price.currency)
        return cls(
            base_price=base_price,
            nights=nights,
            subtotal=subtotal,
            gst_percentage=gst_percentage,
            gst_amount=gst_amount,
            final_amount=subtotal + gst_amount + fee,
            convenience_fee=fee,
            room_quantity=room_quantity,
        )

    @classmethod
    def from_api(
        cls, data: Optional[dict], fallback: Optional[PackagePricing] = None, nights: int = 1
    ) -> Optional["PricingBreakdown"]:
        """
        Build from a server ``pricing`` object, filling the gaps from the
        package's list price. Returns None when neither source has a price.
        """
        data = data or {}
        base = (
            data.get("basePrice")
            or data.get("pricePerDay")
            or data.get("pricePerRoom")
        )
        if base is None and fallback is not None:
            base = fallback.base_price.amount
        if base is None and data.get("finalAmount") is None:
            return None

        gst = data.get("gst") or {}
        gst_percentage = (
            gst.get("percentage")
            or data.get("gstPercentage")
            or (fallback.gst_percentage if fallback else DEFAULT_GST_PERCENTAGE)
        )
        nights = int(data.get("numberOfDays") or data.get("numberOfNights") or nights or 1)
        room_quantity = data.get("numberOfRooms")
        estimate = cls.estimate(Money(base or 0), nights, gst_percentage, room_quantity)

        if data.get("subtotal") is not None:
            estimate.subtotal = Money(data["subtotal"])
        if gst.get("amount") is not None:
            estimate.gst_amount = Money(gst["amount"])
        if data.get("finalAmount") is not None:
            estimate.final_amount = Money(data["finalAmount"])
        return estimate


@dataclass
class Availability:
    available: bool
    pricing: Optional[PricingBreakdown] = None
    message: str = ""
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(
        cls, data: dict, fallback: Optional[PackagePricing] = None, nights: int = 1
    ) -> "Availability":
        return cls(
            available=bool(data.get("available")),
            pricing=PricingBreakdown.from_api(data.get("pricing"), fallback, nights),
            message=data.get("message") or "",
            raw=dict(data),
        )


@dataclass
class PaymentOrder:
    """Razorpay order created by the server. ``amount`` is in paise."""
    order_id: str
    amount: int
    currency: str = "INR"
    key: Optional[str] = None

    @property
    def money(self) -> Money:
        return Money.from_paise(self.amount, self.currency)


@dataclass
class BookingOrder:
    booking_id: str
    payment: PaymentOrder
    booking_reference: str = ""
    package_id: Optional[str] = None
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    guest_details: Optional[GuestDetails] = None
    room_quantity: Optional[int] = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict) -> "BookingOrder":
        """
        Accepts both create-order response shapes:

        ``{booking: {bookingId, bookingReferenceId}, razorpay: {orderId, amount, currency, key}}``
        ``{bookingId, bookingReference, razorpayOrder: {id, amount, currency}, razorpayKeyId}``
        """
        booking = data.get("booking") or {}
        razorpay = data.get("razorpay") or {}
        legacy_order = data.get("razorpayOrder") or {}
        dates = data.get("dates") or {}

        booking_id = (
            booking.get("bookingId")
            or _id_of(booking)
            or data.get("bookingId")
        )
        order_id = razorpay.get("orderId") or legacy_order.get("id")
        if not booking_id or not order_id:
            raise ValueError("Create-order response is missing the booking or order id")

        payment = PaymentOrder(
            order_id=str(order_id),
            amount=int(razorpay.get("amount") or legacy_order.get("amount") or 0),
            currency=razorpay.get("currency") or legacy_order.get("currency") or "INR",
            key=razorpay.get("key") or data.get("razorpayKeyId"),
        )
        return cls(
            booking_id=str(booking_id),
            payment=payment,
            booking_reference=(
                booking.get("bookingReferenceId") or data.get("bookingReference") or ""
            ),
            check_in_date=dates.get("checkInDate"),
            check_out_date=dates.get("checkOutDate"),
            raw=dict(data),
        )


@dataclass
class Booking:
    id: str
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    reference: str = ""
    package_name: str = ""
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    guest_details: Optional[GuestDetails] = None
    pricing: Optional[PricingBreakdown] = None
    cancellation_reason: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: dict) -> "Booking":
        package = data.get("package") or {}
        return cls(
            id=data.get("bookingId") or _id_of(data) or "",
            status=BookingStatus.parse(data.get("status")),
            payment_status=PaymentStatus.parse(data.get("paymentStatus")),
            reference=data.get("bookingReferenceId") or data.get("bookingReference") or "",
            package_name=package.get("name", "") if isinstance(package, dict) else "",
            check_in_date=data.get("checkInDate"),
            check_out_date=data.get("checkOutDate"),
            guest_details=(
                GuestDetails.from_api(data["guestDetails"]) if data.get("guestDetails") else None
            ),
            pricing=PricingBreakdown.from_api(data.get("pricing")),
            cancellation_reason=data.get("cancellationReason"),
            raw=dict(data),
        )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @property
    def is_cancellable(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)
