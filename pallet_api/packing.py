# pallet_api/packing.py
"""
Multi-item pallet allocation.

This module provides:
- fit_items_on_pallet: joint fit of a group of items on one pallet
  (weight, per-item 3D orientation, 2D surface packing, centred layout)
- optimize_multi_item: cheapest allocation of a list of items to pallets
- summary printing helpers

Strategy of optimize_multi_item:
1) Try to put every item on a single pallet, cheapest pallet types first.
2) Otherwise allocate greedily: for each pallet type take the largest group
   (up to MULTI_ITEM_WINDOW) of the next items that fits, keep the pallet and
   group with the lowest gross price per item, repeat. Items that fit nowhere
   are reported as unallocated.

Items are sorted once by footprint area (largest first) and both phases work
on that order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from . import config
from .fitting import (
    available_height_cm,
    check_3d_fit,
    footprint_for_orientation,
    get_effective_limits,
    orientation_label,
    pallet_dimensions_to_cm,
    round_cm,
)
from .models import (
    FurnitureItem,
    ItemPlacement,
    MultiItemResult,
    PackedItem,
    PackRect,
    PalletAllocation,
    PalletType,
    RateTable,
    Surcharges,
    TransportOptions,
    UnallocatedItem,
)
from .packer import RectanglePacker
from .pricing import calculate_price, find_rate, format_price, money, to_decimal

logger = logging.getLogger(__name__)

NO_RATE = Decimal("Infinity")

# ----------------------------
# Joint fit of a group of items
# ----------------------------


@dataclass
class JointFit:
    fits: bool
    placements: List[ItemPlacement] = field(default_factory=list)
    layout_notes: List[str] = field(default_factory=list)


@dataclass
class _PreparedItem:
    item: FurnitureItem
    orientation: str
    footprint_length: float
    footprint_width: float
    height: float
    warnings: List[str]


def total_weight(items: Sequence[FurnitureItem]) -> Decimal:
    """Exact sum of item weights."""
    return sum((to_decimal(it.weight_kg) for it in items), Decimal(0))


def group_rows(packed: List[PackedItem]) -> List[List[PackedItem]]:
    """
    Cluster placements into rows: items whose vertical extents overlap,
    directly or through other items, belong to the same row.
    """
    remaining = list(packed)
    groups: List[List[PackedItem]] = []

    while remaining:
        remaining.sort(key=lambda p: p.y)
        seed = remaining.pop(0)
        group = [seed]
        queue = [seed]

        while queue:
            current = queue.pop()
            for i in range(len(remaining) - 1, -1, -1):
                other = remaining[i]
                if current.y < other.y + other.height and current.y + current.height > other.y:
                    removed = remaining.pop(i)
                    group.append(removed)
                    queue.append(removed)

        groups.append(group)

    return groups


def center_layout(
    packed: List[PackedItem], surface_width: float, surface_height: float
) -> Dict[str, Tuple[float, float]]:
    """
    Centre each row horizontally on the surface, then centre the whole layout
    vertically. Returns final (x, y) per packed id.
    """
    positions: Dict[str, Tuple[float, float]] = {}
    if not packed:
        return positions

    for group in group_rows(packed):
        min_x = min(p.x for p in group)
        max_x = max(p.x + p.width for p in group)
        offset_x = (surface_width - (max_x - min_x)) / 2 - min_x
        for p in group:
            positions[p.id] = (p.x + offset_x, p.y)

    min_y = min(p.y for p in packed)
    max_y = max(p.y + p.height for p in packed)
    offset_y = (surface_height - (max_y - min_y)) / 2 - min_y

    return {pid: (x, y + offset_y) for pid, (x, y) in positions.items()}


def fit_items_on_pallet(
    items: Sequence[FurnitureItem],
    pallet: PalletType,
    margin_cm: float,
    options: TransportOptions,
) -> JointFit:
    """
    Check whether all `items` fit on one `pallet` together and lay them out.

    Steps:
    1) total weight against the effective weight limit
    2) each item on its own against footprint and height (first-fit orientation)
    3) the chosen footprints packed together on the pallet surface
    4) rows centred on the pallet for display
    """
    pallet_length_cm, pallet_width_cm = pallet_dimensions_to_cm(pallet)
    limits = get_effective_limits(options, pallet.max_height_cm, pallet.max_weight_kg)
    height_budget = available_height_cm(limits)

    if total_weight(items) > to_decimal(limits.max_weight_kg):
        return JointFit(fits=False, layout_notes=["Weight limit exceeded"])

    prepared: List[_PreparedItem] = []
    for item in items:
        fit = check_3d_fit(
            item.length_cm,
            item.width_cm,
            item.height_cm,
            pallet_length_cm,
            pallet_width_cm,
            height_budget,
            margin_cm,
        )
        if not fit.fits:
            return JointFit(fits=False, layout_notes=[f"{item.name} does not fit"])

        fl, fw, h = footprint_for_orientation(
            item.length_cm, item.width_cm, item.height_cm, fit.orientation, margin_cm
        )
        warnings: List[str] = []
        if h >= height_budget - config.NEAR_HEIGHT_MARGIN_CM:
            warnings.append(f"Close to the height limit ({h:g}cm / {height_budget:g}cm)")
        if fit.tilted:
            warnings.append(f"Must be placed: {fit.label.lower()}")

        prepared.append(
            _PreparedItem(
                item=item,
                orientation=fit.orientation,
                footprint_length=fl,
                footprint_width=fw,
                height=h,
                warnings=warnings,
            )
        )

    # Packer x axis runs along the pallet width, y along its length.
    surface_width = round_cm(pallet_width_cm)
    surface_length = round_cm(pallet_length_cm)
    packer = RectanglePacker(surface_width, surface_length)
    packed = packer.pack(
        PackRect(id=str(i), w=round_cm(p.footprint_width), h=round_cm(p.footprint_length))
        for i, p in enumerate(prepared)
    )
    if packed is None:
        return JointFit(
            fits=False, layout_notes=["Items do not fit on the pallet surface together"]
        )

    positions = center_layout(packed, surface_width, surface_length)

    placements = []
    for node in packed:
        p = prepared[int(node.id)]
        x, y = positions[node.id]
        placements.append(
            ItemPlacement(
                item=p.item,
                orientation=p.orientation,
                orientation_label=orientation_label(p.orientation),
                warnings=p.warnings,
                footprint_width_cm=node.width,
                footprint_length_cm=node.height,
                height_cm=round_cm(p.height),
                position_x=x,
                position_y=y,
            )
        )

    return JointFit(fits=True, placements=placements)


# ----------------------------
# Ordering helpers
# ----------------------------


def sort_pallets_by_rate(
    pallet_types: Sequence[PalletType], rate_table: RateTable, distance_band: str
) -> List[PalletType]:
    """
    Pallet types by their rate for a light probe load, cheapest first.
    Pallets without a rate go last; ties keep catalogue order.
    """

    def rate_key(pallet: PalletType) -> Decimal:
        rate = find_rate(
            rate_table, pallet.category, config.RATE_SORT_PROBE_WEIGHT_KG, distance_band
        )
        return NO_RATE if rate is None else rate

    return sorted(pallet_types, key=rate_key)


def sort_items_by_area(
    items: Sequence[FurnitureItem], margin_cm: float
) -> List[FurnitureItem]:
    """Items by footprint area with margin, largest first (stable)."""
    return sorted(items, key=lambda it: it.footprint_area(margin_cm), reverse=True)


# ----------------------------
# Multi-item allocator
# ----------------------------


def _allocate(
    items: Sequence[FurnitureItem],
    pallet: PalletType,
    joint: JointFit,
    rate_table: RateTable,
    surcharges: Surcharges,
    distance_band: str,
) -> Optional[PalletAllocation]:
    weight = total_weight(items)
    rate = find_rate(rate_table, pallet.category, weight, distance_band)
    if rate is None:
        return None
    return PalletAllocation(
        pallet=pallet,
        items=joint.placements,
        total_weight_kg=float(weight),
        price_breakdown=calculate_price(rate, surcharges),
        layout_notes=joint.layout_notes,
    )


def _single_pallet(
    items: List[FurnitureItem],
    pallets: List[PalletType],
    margin_cm: float,
    options: TransportOptions,
    rate_table: RateTable,
    surcharges: Surcharges,
    distance_band: str,
) -> Optional[PalletAllocation]:
    for pallet in pallets:
        joint = fit_items_on_pallet(items, pallet, margin_cm, options)
        if not joint.fits:
            logger.debug("All items on %s rejected: %s", pallet.id, joint.layout_notes)
            continue
        allocation = _allocate(items, pallet, joint, rate_table, surcharges, distance_band)
        if allocation is not None:
            return allocation
        logger.debug("All items fit on %s but no rate applies", pallet.id)
    return None


def _best_group(
    remaining: List[FurnitureItem],
    pallets: List[PalletType],
    margin_cm: float,
    options: TransportOptions,
    rate_table: RateTable,
    surcharges: Surcharges,
    distance_band: str,
    window: int,
) -> Tuple[Optional[PalletAllocation], int]:
    """
    Lowest gross-per-item (pallet, leading group) combination.

    For each pallet the largest leading group that fits and has a rate is
    taken; smaller groups on the same pallet are not tried after that.
    """
    best: Optional[PalletAllocation] = None
    best_count = 0
    best_cost = NO_RATE

    for pallet in pallets:
        for count in range(min(len(remaining), window), 0, -1):
            group = remaining[:count]
            joint = fit_items_on_pallet(group, pallet, margin_cm, options)
            if not joint.fits:
                continue
            allocation = _allocate(
                group, pallet, joint, rate_table, surcharges, distance_band
            )
            if allocation is None:
                continue

            cost_per_item = allocation.price_breakdown.gross / count
            if cost_per_item < best_cost:
                best, best_count, best_cost = allocation, count, cost_per_item
            break

    return best, best_count


def optimize_multi_item(
    items: Sequence[FurnitureItem],
    pallet_types: Sequence[PalletType],
    rate_table: RateTable,
    surcharges: Surcharges,
    distance_band: str = "LE_100",
    options: Optional[TransportOptions] = None,
    packaging_margin_cm: float = config.DEFAULT_PACKAGING_MARGIN_CM,
    window: int = config.MULTI_ITEM_WINDOW,
) -> MultiItemResult:
    """
    Allocate `items` to the cheapest set of pallets found by the two-phase
    heuristic described in the module docstring.

    Returns a MultiItemResult; nothing is raised for items that do not fit,
    they are listed in `unallocated` instead.
    """
    options = options or TransportOptions()
    allocations: List[PalletAllocation] = []
    unallocated: List[UnallocatedItem] = []
    warnings: List[str] = []

    pallets = sort_pallets_by_rate(pallet_types, rate_table, distance_band)
    remaining = sort_items_by_area(items, packaging_margin_cm)

    if remaining:
        single = _single_pallet(
            remaining, pallets, packaging_margin_cm, options, rate_table, surcharges, distance_band
        )
        if single is not None:
            allocations.append(single)
            remaining = []

    if remaining:
        warnings.append("Not all items fit on a single pallet")

        while remaining:
            best, count = _best_group(
                remaining,
                pallets,
                packaging_margin_cm,
                options,
                rate_table,
                surcharges,
                distance_band,
                window,
            )
            if best is not None:
                logger.debug("Allocated %d item(s) to %s", count, best.pallet.id)
                allocations.append(best)
                remaining = remaining[count:]
            else:
                item = remaining.pop(0)
                unallocated.append(
                    UnallocatedItem(
                        item=item,
                        reason="NO_FIT",
                        details="No matching pallet found (or the item is too heavy)",
                    )
                )
                warnings.append(f'Item "{item.name}" does not fit on any pallet')

    total_gross = sum(
        (a.price_breakdown.gross for a in allocations), Decimal(0)
    )

    logger.info(
        "Allocated %d item(s) to %d pallet(s), %d unallocated, total %s",
        len(items) - len(unallocated),
        len(allocations),
        len(unallocated),
        money(total_gross),
    )

    return MultiItemResult(
        allocations=allocations,
        pallet_count=len(allocations),
        total_gross=money(total_gross),
        unallocated=unallocated,
        warnings=warnings,
    )


# ----------------------------
# Summary printing helpers
# ----------------------------


def print_allocation_summary(result: MultiItemResult) -> None:
    """
    Print a human-friendly allocation summary to stdout.
    """
    for idx, alloc in enumerate(result.allocations, start=1):
        print(f"Pallet {idx}: {alloc.pallet.display_name}")
        print(f" Size: {alloc.pallet.length_m}m x {alloc.pallet.width_m}m")
        print(f" Weight: {alloc.total_weight_kg} kg")
        print(f" Price (gross): {format_price(alloc.price_breakdown.gross_total)}")
        print(" Items:")
        for pl in alloc.items:
            print(
                f" - {pl.item.name}: {pl.orientation_label}, "
                f"{pl.footprint_width_cm}x{pl.footprint_length_cm}x{pl.height_cm} cm "
                f"at ({pl.position_x:.1f}, {pl.position_y:.1f})"
            )
            for w in pl.warnings:
                print(f"   ! {w}")
        print()

    if result.unallocated:
        print("Items that could NOT be allocated:")
        for u in result.unallocated:
            print(f" - {u.item.name}: {u.details}")
    else:
        print("All items were allocated.")

    print(f"Total: {result.pallet_count} pallet(s), {format_price(result.total_gross)}")


__all__ = [
    "JointFit",
    "total_weight",
    "group_rows",
    "center_layout",
    "fit_items_on_pallet",
    "sort_pallets_by_rate",
    "sort_items_by_area",
    "optimize_multi_item",
    "print_allocation_summary",
]
