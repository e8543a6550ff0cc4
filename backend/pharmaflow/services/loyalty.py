"""
Loyalty points earned per sale.

Two tiered components are added together:
1. a rate on the order total
2. a bonus rate per line, chosen by the line's effective unit price,
   applied to price * quantity

Tiers are checked from the top; a value must be strictly greater than
the threshold to get the rate.
"""
from typing import Iterable, Sequence, Tuple

TOTAL_RATE_TIERS: Sequence[Tuple[float, float]] = (
    (20000, 0.05),
    (10000, 0.04),
    (5000, 0.03),
    (1000, 0.02),
    (100, 0.01),
)

ITEM_RATE_TIERS: Sequence[Tuple[float, float]] = (
    (20000, 0.15),
    (10000, 0.12),
    (5000, 0.10),
    (1000, 0.05),
    (500, 0.03),
    (100, 0.02),
)


def rate_for_value(value: float, tiers: Sequence[Tuple[float, float]]) -> float:
    for threshold, rate in tiers:
        if value > threshold:
            return rate
    return 0.0


def effective_unit_price(price: float, is_unit: bool, units_per_pack: int | None) -> float:
    """Line prices are pack prices; a line sold by the unit is worth price / units_per_pack each."""
    if is_unit and units_per_pack:
        return price / units_per_pack
    return price


def item_points(price: float, quantity: int, is_unit: bool = False, units_per_pack: int | None = 1) -> float:
    unit_price = effective_unit_price(float(price), is_unit, units_per_pack)
    rate = rate_for_value(unit_price, ITEM_RATE_TIERS)
    return unit_price * quantity * rate


def calculate_loyalty_points(total: float, items: Iterable) -> float:
    """
    Points for one sale, rounded to one decimal place.

    items: objects with price, quantity, is_unit and units_per_pack attributes
    (cart lines or SaleItem rows).
    """
    total = float(total)
    points = total * rate_for_value(total, TOTAL_RATE_TIERS)
    for item in items:
        points += item_points(item.price, item.quantity, item.is_unit, item.units_per_pack)
    return round(points, 1)
