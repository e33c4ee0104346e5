"""
Booking price calculation.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from hajzi.models.base.enums import Currency
from hajzi.models.room.room import Room

CENT = Decimal("0.01")


def calculate_nights(check_in: date, check_out: date) -> int:
    """
    Number of nights between two dates.

    Raises:
        ValueError: If check_out is not after check_in
    """
    nights = (check_out - check_in).days
    if nights <= 0:
        raise ValueError("check_out must be after check_in")
    return nights


def calculate_price(base_price: Decimal, check_in: date, check_out: date) -> Decimal:
    """Nightly base price times nights, rounded to cents."""
    total = Decimal(base_price) * calculate_nights(check_in, check_out)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceQuote:
    nights: int
    nightly_rate: Decimal
    total: Decimal
    currency: Currency


class BookingPricingService:

    def quote(self, room: Room, check_in: date, check_out: date) -> PriceQuote:
        nights = calculate_nights(check_in, check_out)
        return PriceQuote(
            nights=nights,
            nightly_rate=Decimal(room.base_price).quantize(CENT, rounding=ROUND_HALF_UP),
            total=calculate_price(room.base_price, check_in, check_out),
            currency=room.currency,
        )
