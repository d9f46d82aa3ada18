# pallet_api/fitting.py
"""
Fitting a single cuboid item onto a pallet footprint.

This module provides:
- the six axis-aligned resting orientations of an item and their footprints
- check_3d_fit: first-fit orientation search within footprint and height
- effective height/weight limits after transport-mode overrides
- small unit helpers shared by the optimizers

All functions are pure and operate on plain numbers or the dataclasses in
`pallet_api.models`.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import List, Tuple

from . import config
from .models import (
    ORIENTATION_LABELS,
    EffectiveLimits,
    FitResult,
    PalletType,
    TransportOptions,
)

# ----------------------------
# Orientations
# ----------------------------

# Preference order: upright first, then laid on a side, then stood on an end.
ORIENTATIONS: Tuple[str, ...] = (
    "normal",
    "rotated",
    "tiltedOnSide",
    "tiltedOnSideRotated",
    "tiltedOnEnd",
    "tiltedOnEndRotated",
)


def footprint_for_orientation(
    length: float,
    width: float,
    height: float,
    orientation: str,
    margin_cm: float = 0.0,
) -> Tuple[float, float, float]:
    """
    Return (footprint_length, footprint_width, resulting_height) for an item
    resting in `orientation`.

    Packaging margin is added to both footprint dimensions only.
    """
    if orientation == "normal":
        fl, fw, h = length, width, height
    elif orientation == "rotated":
        fl, fw, h = width, length, height
    elif orientation == "tiltedOnSide":
        fl, fw, h = length, height, width
    elif orientation == "tiltedOnSideRotated":
        fl, fw, h = height, length, width
    elif orientation == "tiltedOnEnd":
        fl, fw, h = width, height, length
    elif orientation == "tiltedOnEndRotated":
        fl, fw, h = height, width, length
    else:
        raise ValueError(f"Unknown orientation: {orientation!r}")
    return fl + margin_cm, fw + margin_cm, h


def orientations_of(
    length: float, width: float, height: float, margin_cm: float = 0.0
) -> List[Tuple[str, Tuple[float, float, float]]]:
    """All six orientations, in preference order, with their footprints."""
    return [
        (o, footprint_for_orientation(length, width, height, o, margin_cm))
        for o in ORIENTATIONS
    ]


def orientation_label(orientation: str) -> str:
    """Human-readable label for an orientation."""
    return ORIENTATION_LABELS[orientation]


def check_3d_fit(
    item_length_cm: float,
    item_width_cm: float,
    item_height_cm: float,
    pallet_length_cm: float,
    pallet_width_cm: float,
    max_height_cm: float,
    margin_cm: float = 0.0,
) -> FitResult:
    """
    Check whether an item fits on a pallet in any of its six orientations.

    Orientations are tried in the fixed order of ORIENTATIONS and the first
    one whose footprint (with margin) lies within the pallet and whose height
    stays within `max_height_cm` is returned. This is first-fit, not best-fit.
    """
    for orientation, (fl, fw, h) in orientations_of(
        item_length_cm, item_width_cm, item_height_cm, margin_cm
    ):
        if fl <= pallet_length_cm and fw <= pallet_width_cm and h <= max_height_cm:
            return FitResult(
                fits=True, orientation=orientation, rotated=orientation != "normal"
            )

    return FitResult(fits=False, orientation="normal", rotated=False)


def footprint_only_fits(
    item_length_cm: float,
    item_width_cm: float,
    item_height_cm: float,
    pallet_length_cm: float,
    pallet_width_cm: float,
    margin_cm: float = 0.0,
) -> bool:
    """True if some orientation's footprint fits, ignoring height."""
    return any(
        fl <= pallet_length_cm and fw <= pallet_width_cm
        for _, (fl, fw, _h) in orientations_of(
            item_length_cm, item_width_cm, item_height_cm, margin_cm
        )
    )


# ----------------------------
# Limits and units
# ----------------------------


def get_effective_limits(
    options: TransportOptions,
    pallet_max_height_cm: float,
    pallet_max_weight_kg: float,
) -> EffectiveLimits:
    """
    Combine the absolute ceilings, the pallet's own limits and the transport
    mode. A 3.5-tonne van takes precedence over the lift option.
    """
    max_height_cm = min(config.ABSOLUTE_MAX_HEIGHT_CM, pallet_max_height_cm)
    max_weight_kg = min(config.ABSOLUTE_MAX_WEIGHT_KG, pallet_max_weight_kg)

    if options.van35:
        max_height_cm = min(config.VAN35_MAX_HEIGHT_CM, max_height_cm)
        max_weight_kg = min(config.VAN35_MAX_WEIGHT_KG, max_weight_kg)
    elif options.lift:
        max_weight_kg = min(config.LIFT_MAX_WEIGHT_KG, max_weight_kg)

    return EffectiveLimits(max_height_cm=max_height_cm, max_weight_kg=max_weight_kg)


def available_height_cm(limits: EffectiveLimits) -> float:
    """Height left for the load once the pallet base is accounted for."""
    return limits.max_height_cm - config.PALLET_BASE_HEIGHT_CM


def pallet_dimensions_to_cm(pallet: PalletType) -> Tuple[float, float]:
    """
    (length_cm, width_cm) of a pallet footprint given in metres.

    Converted through Decimal so that e.g. 2.65 m gives exactly 265 cm.
    """
    length_cm = Decimal(str(pallet.length_m)) * 100
    width_cm = Decimal(str(pallet.width_m)) * 100
    return float(length_cm), float(width_cm)


def round_cm(value: float) -> int:
    """Round half up to whole centimetres."""
    return int(math.floor(value + 0.5))


def is_near_limit(
    value: float,
    limit: float,
    threshold_percent: float = config.NEAR_WEIGHT_THRESHOLD_PERCENT,
) -> bool:
    """True if `value` lies within `threshold_percent` below `limit` (inclusive)."""
    threshold = limit * (threshold_percent / 100)
    return limit - threshold <= value <= limit


__all__ = [
    "ORIENTATIONS",
    "footprint_for_orientation",
    "orientations_of",
    "orientation_label",
    "check_3d_fit",
    "footprint_only_fits",
    "get_effective_limits",
    "available_height_cm",
    "pallet_dimensions_to_cm",
    "round_cm",
    "is_near_limit",
]
