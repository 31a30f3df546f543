"""Form validation mirrored from the app's login, registration and guest forms.

Each validator collects every failing field and raises a single
ValidationError, so nothing invalid is ever sent to the server.
"""

import re
from typing import Optional

from bhavan_booking.exceptions import ValidationError

PHONE_RE = re.compile(r"^[6-9]\d{9}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

LOGIN_PASSWORD_MIN = 6
REGISTER_PASSWORD_MIN = 8
FULL_NAME_MIN = 3


def _raise_if(errors: dict) -> None:
    if errors:
        raise ValidationError(errors)


def _check_phone(phone_number: str, errors: dict, message: str) -> None:
    phone_number = (phone_number or "").strip()
    if not phone_number:
        errors["phoneNumber"] = "Phone number is required"
    elif not PHONE_RE.match(phone_number):
        errors["phoneNumber"] = message


def validate_login(phone_number: str, password: str) -> None:
    errors = {}
    _check_phone(phone_number, errors, "Enter a valid 10-digit phone number")

    if not (password or "").strip():
        errors["password"] = "Password is required"
    elif len(password) < LOGIN_PASSWORD_MIN:
        errors["password"] = f"Password must be at least {LOGIN_PASSWORD_MIN} characters"

    _raise_if(errors)


def validate_registration(
    full_name: str,
    phone_number: str,
    password: str,
    confirm_password: Optional[str] = None,
    email: Optional[str] = None,
) -> None:
    errors = {}
    if not (full_name or "").strip():
        errors["fullName"] = "Full name is required"

    _check_phone(phone_number, errors, "Enter a valid 10-digit phone number")

    # optional, but must be valid if provided
    if (email or "").strip() and not EMAIL_RE.match(email.strip()):
        errors["email"] = "Enter a valid email address"

    if not (password or "").strip():
        errors["password"] = "Password is required"
    elif len(password) < REGISTER_PASSWORD_MIN:
        errors["password"] = f"Password must be at least {REGISTER_PASSWORD_MIN} characters"

    if confirm_password is not None:
        if not confirm_password.strip():
            errors["confirmPassword"] = "Please confirm your password"
        elif password != confirm_password:
            errors["confirmPassword"] = "Passwords do not match"

    _raise_if(errors)


def validate_guest_details(full_name: str, phone_number: str, email: str) -> None:
    errors = {}
    full_name = (full_name or "").strip()
    if not full_name:
        errors["fullName"] = "Full name is required"
    elif len(full_name) < FULL_NAME_MIN:
        errors["fullName"] = f"Name must be at least {FULL_NAME_MIN} characters"

    _check_phone(phone_number, errors, "Enter valid 10-digit mobile number")

    email = (email or "").strip()
    if not email:
        errors["email"] = "Email is required"
    elif not EMAIL_RE.match(email):
        errors["email"] = "Enter valid email address"

    _raise_if(errors)


def validate_room_quantity(category: str, room_quantity) -> Optional[int]:
    """
    Room quantity only matters for ``rooms_only`` packages, where it must be
    an integer of at least 1. Returns the value to send, or None.
    """
    if category != "rooms_only":
        return None
    try:
        quantity = int(room_quantity) if room_quantity is not None else 0
    except (TypeError, ValueError):
        quantity = 0
    if quantity < 1:
        raise ValidationError(
            {"roomQuantity": "Please select the number of rooms."},
            message="Please select the number of rooms.",
        )
    return quantity
