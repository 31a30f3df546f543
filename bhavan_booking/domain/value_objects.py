"""
Common Value Objects

- Money: amounts in rupees, convertible to paise for the payment gateway
- DateRange: a stay from check-in (inclusive) to check-out (exclusive)
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP


@dataclass(frozen=True)
class ValueObject:
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Razorpay expects amounts in the smallest currency unit, so conversion
    to and from paise lives here.
    """
    amount: Decimal
    currency: str = 'INR'

    def __post_init__(self):
        object.__setattr__(self, 'amount', _to_decimal(self.amount))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")

    @classmethod
    def from_paise(cls, paise: int, currency: str = 'INR') -> 'Money':
        return cls(Decimal(int(paise)) / 100, currency)

    def to_paise(self) -> int:
        return int((self.amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    def percentage(self, percent) -> 'Money':
        """Percentage of the amount rounded to whole rupees (half up)."""
        value = (self.amount * _to_decimal(percent) / 100).quantize(
            Decimal('1'), rounding=ROUND_HALF_UP
        )
        return Money(value, self.currency)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * _to_decimal(factor), self.currency)

    def __str__(self):
        symbol = '₹' if self.currency == 'INR' else f'{self.currency} '
        return f"{symbol}{self.amount:,.0f}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    check_in is inclusive, check_out exclusive, so len() is the number of nights.
    """
    check_in: date
    check_out: date

    def __post_init__(self):
        if self.check_in >= self.check_out:
            raise ValueError(
                f"Check-out date ({self.check_out}) must be after check-in date ({self.check_in})"
            )

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{self.check_in.strftime('%d-%m-%Y')} - {self.check_out.strftime('%d-%m-%Y')}"
