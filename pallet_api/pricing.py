# pallet_api/pricing.py
"""
Tariff lookup and price arithmetic.

- find_rate: tiered rate lookup by category, weight and distance band
- calculate_price: minimum floor, fuel and road surcharges, VAT
- calculate_carry_price: carry-in / carry-out service tariff

All money arithmetic uses Decimal; results are rounded half up to two places
only when converted to strings.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from . import config
from .models import CarryPriceResult, PalletType, PriceBreakdown, RateTable, Surcharges

Number = Union[int, float, Decimal]

TWO_PLACES = Decimal("0.01")

# Carry-in service: fixed prices up to 90 kg, then per-kg with a minimum.
CARRY_FIXED_TIERS = ((45, 35), (60, 42), (75, 49), (90, 57))
CARRY_PER_KG_TIERS = (
    # (max weight, rate per kg, minimum price)
    (240, Decimal("0.60"), Decimal(57)),
    (800, Decimal("0.50"), Decimal(144)),
)
CARRY_MAX_WEIGHT_KG = 800
CARRY_SURCHARGE = Decimal(60)
CARRY_SURCHARGE_WEIGHT_RANGE = (100, 168)
CARRY_MAX_DIMENSION_SUM_CM = 400


def to_decimal(value: Number) -> Decimal:
    """Exact Decimal for ints/Decimals, shortest repr for floats."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Decimal) -> str:
    """Fixed two-decimal string."""
    return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def find_rate(
    rate_table: RateTable, category: str, weight_kg: Number, distance_band: str
) -> Optional[Decimal]:
    """
    Rate of the first tier of `category` whose ceiling is >= `weight_kg`.

    Returns None when the category is unknown, no tier is heavy enough or the
    tier has no rate for `distance_band`.
    """
    tiers = rate_table.categories.get(category)
    if not tiers:
        return None

    weight = to_decimal(weight_kg)
    for tier in tiers:
        if weight <= to_decimal(tier.max_weight_kg):
            rate = tier.rates.get(distance_band)
            return None if rate is None else to_decimal(rate)

    return None


def calculate_price(base_rate: Number, surcharges: Surcharges) -> PriceBreakdown:
    """
    Full price breakdown for one pallet.

    The minimum net price applies before surcharges; fuel and road surcharges
    are both percentages of the floored amount; VAT applies to their sum.
    """
    base = to_decimal(base_rate)
    after_minimum = max(base, to_decimal(surcharges.minimum_net_price))

    fuel = after_minimum * to_decimal(surcharges.fuel_percent) / 100
    road = after_minimum * to_decimal(surcharges.road_percent) / 100

    net_total = after_minimum + fuel + road
    vat = net_total * to_decimal(surcharges.vat_percent) / 100
    gross_total = net_total + vat

    return PriceBreakdown(
        base_rate=money(base),
        after_minimum=money(after_minimum),
        fuel_surcharge=money(fuel),
        road_surcharge=money(road),
        net_total=money(net_total),
        vat=money(vat),
        gross_total=money(gross_total),
    )


def calculate_carry_price(
    weight_kg: Number,
    length_cm: Number,
    width_cm: Number,
    height_cm: Number,
    vat_percent: Number = config.VAT_PERCENT,
) -> CarryPriceResult:
    """
    Carry-in / carry-out price for one item.

    A flat surcharge applies for items weighing 100-168 kg or whose three
    dimensions add up to more than 400 cm. Items above 800 kg are not carried.
    """
    weight = to_decimal(weight_kg)
    warnings = []

    if weight > CARRY_MAX_WEIGHT_KG:
        return CarryPriceResult(
            available=False,
            base_price="0.00",
            surcharge="0.00",
            total_net="0.00",
            total_gross="0.00",
            warnings=[
                f"Weight {weight_kg} kg exceeds the {CARRY_MAX_WEIGHT_KG} kg "
                f"limit of the carry-in service."
            ],
        )

    base_price = Decimal(0)
    for max_weight, price in CARRY_FIXED_TIERS:
        if weight <= max_weight:
            base_price = Decimal(price)
            break
    else:
        for max_weight, per_kg, minimum in CARRY_PER_KG_TIERS:
            if weight <= max_weight:
                base_price = max(weight * per_kg, minimum)
                break

    dimension_sum = to_decimal(length_cm) + to_decimal(width_cm) + to_decimal(height_cm)
    low, high = CARRY_SURCHARGE_WEIGHT_RANGE
    heavy = low <= weight <= high
    bulky = dimension_sum > CARRY_MAX_DIMENSION_SUM_CM

    surcharge = Decimal(0)
    if heavy or bulky:
        surcharge = CARRY_SURCHARGE
        if heavy:
            warnings.append(
                f"Surcharge {CARRY_SURCHARGE} {config.CURRENCY}: weight {weight_kg} kg "
                f"({low}-{high} kg)."
            )
        if bulky:
            warnings.append(
                f"Surcharge {CARRY_SURCHARGE} {config.CURRENCY}: dimension sum "
                f"{dimension_sum} cm > {CARRY_MAX_DIMENSION_SUM_CM} cm."
            )

    total_net = base_price + surcharge
    total_gross = total_net + total_net * to_decimal(vat_percent) / 100

    return CarryPriceResult(
        available=True,
        base_price=money(base_price),
        surcharge=money(surcharge),
        total_net=money(total_net),
        total_gross=money(total_gross),
        warnings=warnings,
    )


def format_price(amount: str) -> str:
    """Format a two-decimal amount for display."""
    return f"{amount} {config.CURRENCY}"


def format_pallet_dimensions(pallet: PalletType) -> str:
    return f"{pallet.length_m}m x {pallet.width_m}m"


__all__ = [
    "to_decimal",
    "money",
    "find_rate",
    "calculate_price",
    "calculate_carry_price",
    "format_price",
    "format_pallet_dimensions",
]
