"""
Booking price calculation.

Hourly services are charged per hour of the session; flat-rate services
(VOD review, the 3-session package) cost the same however long they take.
A percentage discount from a fixed menu is then applied on top.

Prices are kept as unrounded floats and only rounded for display.
"""

from dataclasses import dataclass

from .models import PricingTable, ServiceType

ALLOWED_DISCOUNTS = (0, 10, 15, 20, 25, 50)


class InvalidInputError(ValueError):
    """Raised when user-supplied booking or record data is not acceptable."""
    pass


@dataclass(frozen=True)
class PriceBreakdown:
    """Price of a booking before and after its discount."""
    base_price: float
    final_price: float

    @property
    def savings(self) -> float:
        return self.base_price - self.final_price


def compute_price(
    service: ServiceType,
    unit_price: float,
    duration: float,
    discount_percent: int = 0,
) -> PriceBreakdown:
    """
    Compute base and final price for a booking.

    Duration is still validated for flat-rate services because it is
    recorded on the booking, even though it does not affect the price.
    """
    if discount_percent not in ALLOWED_DISCOUNTS:
        raise InvalidInputError(
            f"Discount must be one of {ALLOWED_DISCOUNTS}, got {discount_percent}"
        )
    if duration is None or duration <= 0:
        raise InvalidInputError("Duration must be a positive number of hours")
    if unit_price < 0:
        raise InvalidInputError("Price cannot be negative")

    if service.is_hourly:
        base_price = unit_price * duration
    else:
        base_price = unit_price

    final_price = base_price * (1 - discount_percent / 100)

    return PriceBreakdown(base_price=base_price, final_price=final_price)


def unit_price_for(service: ServiceType, pricing: PricingTable) -> float:
    """Current configured unit price for a service."""
    return pricing.price_for(service)
