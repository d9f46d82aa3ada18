# pallet_api/optimizer.py
"""
Single-item pallet recommendation.

Every pallet type in the catalogue is checked against one item: effective
limits for the transport mode, 3D orientation fit, weight and tariff. Pallets
that pass are priced and ranked by gross price; the cheapest is recommended
and the next few are offered as alternatives. Pallets that fail carry every
reason that applies, not just the first one.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from . import config
from .fitting import (
    available_height_cm,
    check_3d_fit,
    footprint_only_fits,
    get_effective_limits,
    is_near_limit,
    orientation_label,
    pallet_dimensions_to_cm,
)
from .models import (
    FurnitureItem,
    MatchResult,
    OptimizerResult,
    PalletType,
    RateTable,
    RejectedResult,
    Surcharges,
    TransportOptions,
)
from .pricing import calculate_price, find_rate, format_pallet_dimensions, format_price

logger = logging.getLogger(__name__)


def optimize(
    item: FurnitureItem,
    pallet_types: List[PalletType],
    rate_table: RateTable,
    surcharges: Surcharges,
    distance_band: str = "LE_100",
    options: Optional[TransportOptions] = None,
    packaging_margin_cm: float = config.DEFAULT_PACKAGING_MARGIN_CM,
    max_alternatives: int = config.OPTIMIZER_ALTERNATIVES,
) -> OptimizerResult:
    """
    Find the cheapest pallet for a single item.

    Returns an OptimizerResult with:
    - recommended: cheapest accepted pallet, or None
    - alternatives: up to `max_alternatives` next cheapest pallets
    - rejected: pallets that cannot take the item, with all reasons
    """
    options = options or TransportOptions()
    candidates: List[MatchResult] = []
    rejected: List[RejectedResult] = []

    for pallet in pallet_types:
        reasons: List[str] = []
        warnings: List[str] = []

        pallet_length_cm, pallet_width_cm = pallet_dimensions_to_cm(pallet)
        limits = get_effective_limits(options, pallet.max_height_cm, pallet.max_weight_kg)
        height_budget = available_height_cm(limits)

        fit = check_3d_fit(
            item.length_cm,
            item.width_cm,
            item.height_cm,
            pallet_length_cm,
            pallet_width_cm,
            height_budget,
            packaging_margin_cm,
        )
        if not fit.fits:
            if footprint_only_fits(
                item.length_cm,
                item.width_cm,
                item.height_cm,
                pallet_length_cm,
                pallet_width_cm,
                packaging_margin_cm,
            ):
                reasons.append("HEIGHT_LIMIT")
            else:
                reasons.append("OVERHANG")

        if item.weight_kg > limits.max_weight_kg:
            reasons.append("WEIGHT_LIMIT")
        elif is_near_limit(item.weight_kg, limits.max_weight_kg):
            warnings.append(
                f"Weight close to the limit: {item.weight_kg:g}kg / {limits.max_weight_kg:g}kg"
            )

        rate = find_rate(rate_table, pallet.category, item.weight_kg, distance_band)
        if rate is None:
            reasons.append("NO_RATE_MATCH")

        if reasons:
            logger.debug("Pallet %s rejected for %s: %s", pallet.id, item.id, reasons)
            rejected.append(RejectedResult(pallet=pallet, reasons=reasons))
            continue

        candidates.append(
            MatchResult(
                pallet=pallet,
                fits_rotated=fit.rotated,
                orientation_label=None
                if fit.orientation == "normal"
                else orientation_label(fit.orientation),
                price_breakdown=calculate_price(rate, surcharges),
                warnings=warnings,
            )
        )

    # sorted() is stable: equal prices keep catalogue order
    candidates = sorted(candidates, key=lambda c: c.price_breakdown.gross)

    logger.info(
        "Item %s: %d pallet(s) accepted, %d rejected",
        item.id,
        len(candidates),
        len(rejected),
    )

    return OptimizerResult(
        recommended=candidates[0] if candidates else None,
        alternatives=candidates[1 : 1 + max_alternatives],
        rejected=rejected,
    )


def print_optimizer_summary(result: OptimizerResult) -> None:
    """
    Print the recommendation, alternatives and rejections to stdout.
    """
    if result.recommended is None:
        print("No pallet can take this item.")
    else:
        rec = result.recommended
        print(f"Recommended: {rec.pallet.display_name} ({format_pallet_dimensions(rec.pallet)})")
        print(f" Price (gross): {format_price(rec.price_breakdown.gross_total)}")
        if rec.orientation_label:
            print(f" Orientation: {rec.orientation_label}")
        for w in rec.warnings:
            print(f"   ! {w}")

    if result.alternatives:
        print("Alternatives:")
        for alt in result.alternatives:
            print(f" - {alt.pallet.display_name}: {format_price(alt.price_breakdown.gross_total)}")

    if result.rejected:
        print("Rejected:")
        for r in result.rejected:
            print(f" - {r.pallet.display_name}: {', '.join(r.reasons)}")


__all__ = ["optimize", "print_optimizer_summary"]
