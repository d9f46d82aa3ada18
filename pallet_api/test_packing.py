"""
Tests for the multi-item allocator in pallet_api.packing.

These tests:
- Validate the joint fit of item groups on one pallet (weight, orientation,
  surface packing, centred layout, warnings).
- Validate both allocation phases of optimize_multi_item on small inputs.

Run with: pytest -q
"""

from pallet_api import config
from pallet_api import models as m
from pallet_api import packing as packing_core
from pallet_api.fitting import pallet_dimensions_to_cm


def example_pallets():
    """Single 120x80 pallet, 200 cm high, 1000 kg."""
    return [m.PalletType("STANDARD", 1.2, 0.8, 200, 1000, "STANDARD", "Standard")]


def example_rate_table():
    bands = ("LE_100", "KM_101_300", "KM_301_500", "GT_500")

    def tier(max_weight, *rates):
        return m.RateTier(max_weight, dict(zip(bands, rates)))

    return m.RateTable(
        categories={
            "STANDARD": [
                tier(100, 50, 60, 70, 80),
                tier(500, 100, 120, 140, 160),
                tier(1500, 200, 240, 280, 320),
            ]
        }
    )


def example_surcharges():
    return m.Surcharges(
        fuel_percent=0, road_percent=0, vat_percent=23, minimum_net_price=10
    )


def item(item_id, length=100, width=80, height=100, weight=50, name=None):
    return m.FurnitureItem(item_id, length, width, height, weight, name=name)


def allocate(items, pallets=None, rate_table=None, surcharges=None, margin=5, **kwargs):
    return packing_core.optimize_multi_item(
        items,
        pallets if pallets is not None else example_pallets(),
        rate_table if rate_table is not None else example_rate_table(),
        surcharges if surcharges is not None else example_surcharges(),
        packaging_margin_cm=margin,
        **kwargs,
    )


def assert_layout_inside_and_disjoint(allocation):
    length, width = pallet_dimensions_to_cm(allocation.pallet)
    placements = allocation.items
    for p in placements:
        assert 0 <= p.position_x and p.position_x + p.footprint_width_cm <= width
        assert 0 <= p.position_y and p.position_y + p.footprint_length_cm <= length
    for i, a in enumerate(placements):
        for b in placements[i + 1 :]:
            assert (
                a.position_x + a.footprint_width_cm <= b.position_x
                or b.position_x + b.footprint_width_cm <= a.position_x
                or a.position_y + a.footprint_length_cm <= b.position_y
                or b.position_y + b.footprint_length_cm <= a.position_y
            )


# ----------------------------
# Phase 1: single pallet
# ----------------------------


def test_single_small_item_on_standard_pallet():
    result = allocate([item("1", length=60, width=40, weight=20)])
    assert result.pallet_count == 1
    assert result.allocations[0].pallet.id == "STANDARD"
    assert result.unallocated == []
    assert result.warnings == []


def test_two_small_items_share_one_pallet():
    result = allocate([item("1", 40, 40, weight=20), item("2", 40, 40, weight=20)])
    assert result.pallet_count == 1
    assert len(result.allocations[0].items) == 2
    assert result.allocations[0].total_weight_kg == 40
    assert_layout_inside_and_disjoint(result.allocations[0])


def test_cheapest_pallet_type_is_tried_first():
    cfg = config.default_config()
    result = allocate(
        [item("1", 50, 40, 80, weight=20)],
        pallets=cfg.pallet_types,
        rate_table=cfg.rate_table,
        surcharges=cfg.surcharges,
        margin=0,
    )
    assert result.allocations[0].pallet.id == "HALF_80x60"


def test_weights_are_summed_exactly():
    result = allocate([item(str(i), 20, 20, 20, weight=0.1) for i in range(3)])
    assert result.allocations[0].total_weight_kg == 0.3


def test_empty_request_allocates_nothing():
    result = allocate([])
    assert result.pallet_count == 0
    assert result.allocations == []
    assert result.total_gross == "0.00"
    assert result.warnings == []


# ----------------------------
# Phase 2: greedy grouping
# ----------------------------


def test_weight_limit_splits_group():
    result = allocate(
        [item("1", 40, 60, weight=600), item("2", 40, 60, weight=600)]
    )
    assert result.pallet_count == 2
    assert [len(a.items) for a in result.allocations] == [1, 1]
    assert result.warnings == ["Not all items fit on a single pallet"]
    # 200 net + 23 % VAT per pallet
    assert result.total_gross == "492.00"


def test_large_items_that_do_not_fit_together_are_split():
    # 110x70 + 5 cm margin = 115x75 each: one fits 120x80, two do not
    result = allocate([item("1", 110, 70), item("2", 110, 70)])
    assert result.pallet_count == 2
    assert result.unallocated == []


def test_window_caps_group_size():
    items = [item(str(i), 30, 30, 50, weight=200) for i in range(6)]

    result = allocate(items, margin=0)
    assert [len(a.items) for a in result.allocations] == [4, 2]

    result = allocate(items, margin=0, window=2)
    assert [len(a.items) for a in result.allocations] == [2, 2, 2]


def test_lowest_cost_per_item_wins_across_pallets():
    pallets = [
        m.PalletType("SMALL", 0.6, 0.6, 220, 1000, "HALF"),
        m.PalletType("BIG", 1.2, 1.2, 220, 1000, "PALLET_120_120"),
    ]
    rate_table = m.RateTable(
        categories={
            "HALF": [m.RateTier(1000, {"LE_100": 50})],
            "PALLET_120_120": [m.RateTier(1000, {"LE_100": 120})],
        }
    )
    surcharges = m.Surcharges(0, 0, 0, 0)
    items = [item(str(i), 55, 55, 50, weight=20) for i in range(5)]

    result = allocate(items, pallets, rate_table, surcharges, margin=0)

    # BIG with four items costs 30 per item, SMALL with one costs 50
    assert [(a.pallet.id, len(a.items)) for a in result.allocations] == [
        ("BIG", 4),
        ("SMALL", 1),
    ]
    assert result.total_gross == "170.00"
    assert_layout_inside_and_disjoint(result.allocations[0])


def test_item_that_fits_nowhere_is_unallocated():
    big = item("big", 300, 300, 300, name="Wardrobe")
    small = item("small", 40, 40, 40, weight=10)
    result = allocate([small, big])

    assert result.pallet_count == 1
    assert [p.item.id for p in result.allocations[0].items] == ["small"]
    assert len(result.unallocated) == 1
    assert result.unallocated[0].item.id == "big"
    assert result.unallocated[0].reason == "NO_FIT"
    assert 'Item "Wardrobe" does not fit on any pallet' in result.warnings


def test_van35_weight_limit_applies_to_groups():
    items = [item("1", 40, 40, 40, weight=250), item("2", 40, 40, 40, weight=250)]
    result = allocate(items, options=m.TransportOptions(van35=True))
    assert result.pallet_count == 2


def test_unknown_category_does_not_break_allocation():
    pallets = [m.PalletType("ODD", 1.2, 0.8, 220, 1500, "MYSTERY")] + example_pallets()
    result = allocate([item("1", 60, 40, weight=20)], pallets=pallets)
    assert result.allocations[0].pallet.id == "STANDARD"


def test_total_gross_is_sum_of_allocations():
    result = allocate([item("1", 110, 70), item("2", 110, 70), item("3", 110, 70)])
    assert result.pallet_count == 3
    grosses = [a.price_breakdown.gross for a in result.allocations]
    assert result.total_gross == str(sum(grosses))


def test_largest_fitting_group_is_kept_per_pallet():
    # a single item would be cheaper per item (lighter tier), but once two
    # items fit together on the pallet smaller groups are not tried
    pallets = [m.PalletType("P", 1.2, 0.8, 220, 500, "STANDARD")]
    rate_table = m.RateTable(
        categories={
            "STANDARD": [
                m.RateTier(250, {"LE_100": 10}),
                m.RateTier(500, {"LE_100": 100}),
            ]
        }
    )
    surcharges = m.Surcharges(0, 0, 0, 0)
    items = [item(str(i), 40, 40, 40, weight=200) for i in range(3)]

    result = allocate(items, pallets, rate_table, surcharges, margin=0)

    assert [len(a.items) for a in result.allocations] == [2, 1]
    assert result.total_gross == "110.00"


def test_single_pallet_phase_skips_pallet_without_rate():
    # CHEAP ranks first at the probe weight but has no tier for 160 kg
    pallets = [m.PalletType("CHEAP", 1.2, 0.8, 200, 1000, "LIMITED")] + example_pallets()
    rate_table = example_rate_table()
    rate_table.categories["LIMITED"] = [m.RateTier(100, {"LE_100": 10})]
    items = [item("1", 40, 40, 40, weight=80), item("2", 40, 40, 40, weight=80)]

    result = allocate(items, pallets, rate_table)

    assert [(a.pallet.id, len(a.items)) for a in result.allocations] == [("STANDARD", 2)]
    assert result.warnings == []


def test_greedy_phase_tries_smaller_group_when_no_rate_applies():
    pallets = [m.PalletType("BIG", 1.2, 0.8, 200, 1500, "STANDARD")]
    rate_table = m.RateTable(
        categories={
            "STANDARD": [
                m.RateTier(100, {"LE_100": 50}),
                m.RateTier(500, {"LE_100": 100}),
            ]
        }
    )
    items = [item(str(i), 40, 40, 40, weight=200) for i in range(4)]

    result = allocate(items, pallets, rate_table, margin=0)

    assert [len(a.items) for a in result.allocations] == [2, 2]
    assert [a.total_weight_kg for a in result.allocations] == [400.0, 400.0]
    assert result.unallocated == []


# ----------------------------
# Joint fit and layout
# ----------------------------


def test_joint_fit_rejects_overweight_group():
    joint = packing_core.fit_items_on_pallet(
        [item("1", weight=600), item("2", weight=600)],
        example_pallets()[0],
        5,
        m.TransportOptions(),
    )
    assert joint.fits is False
    assert joint.layout_notes == ["Weight limit exceeded"]


def test_joint_fit_rejects_item_that_fits_in_no_orientation():
    joint = packing_core.fit_items_on_pallet(
        [item("1", 300, 300, 300, name="Wardrobe")],
        example_pallets()[0],
        5,
        m.TransportOptions(),
    )
    assert joint.fits is False
    assert joint.layout_notes == ["Wardrobe does not fit"]


def test_single_item_is_centred():
    joint = packing_core.fit_items_on_pallet(
        [item("1", 60, 40, 100)], example_pallets()[0], 0, m.TransportOptions()
    )
    assert joint.fits is True
    p = joint.placements[0]
    assert p.position_x + p.footprint_width_cm / 2 == 40
    assert p.position_y + p.footprint_length_cm / 2 == 60
    assert p.height_cm == 100
    assert p.warnings == []


def test_tilted_item_near_height_limit_gets_warnings():
    cfg = config.default_config()
    standard = next(p for p in cfg.pallet_types if p.id == "STANDARD_120x80")
    joint = packing_core.fit_items_on_pallet(
        [item("1", 200, 45, 90)], standard, 0, m.TransportOptions()
    )
    p = joint.placements[0]
    assert p.orientation == "tiltedOnEndRotated"
    assert p.height_cm == 200
    assert p.warnings == [
        "Close to the height limit (200cm / 205cm)",
        "Must be placed: on end + rotated",
    ]


def test_group_rows_clusters_by_vertical_overlap():
    a = m.PackedItem("a", 0, 0, 40, 50)
    b = m.PackedItem("b", 40, 0, 40, 50)
    c = m.PackedItem("c", 0, 50, 80, 30)
    groups = packing_core.group_rows([c, b, a])
    assert sorted(sorted(p.id for p in g) for g in groups) == [["a", "b"], ["c"]]


def test_center_layout_centres_rows_and_layout():
    packed = [
        m.PackedItem("a", 0, 0, 40, 50),
        m.PackedItem("b", 40, 0, 40, 50),
        m.PackedItem("c", 0, 50, 60, 30),
    ]
    positions = packing_core.center_layout(packed, 100, 100)
    assert positions == {"a": (10, 10), "b": (50, 10), "c": (20, 60)}


def test_sort_helpers():
    items = [item("s", 10, 10), item("l", 100, 50), item("m", 50, 50)]
    assert [it.id for it in packing_core.sort_items_by_area(items, 5)] == ["l", "m", "s"]

    cfg = config.default_config()
    ordered = packing_core.sort_pallets_by_rate(
        cfg.pallet_types + [m.PalletType("ODD", 1, 1, 220, 100, "MYSTERY")],
        cfg.rate_table,
        "LE_100",
    )
    assert [p.id for p in ordered] == [
        "HALF_80x60",
        "STANDARD_120x80",
        "PALLET_120_120",
        "LONG_NARROW_265x45",
        "LONG_WIDE_240x80",
        "ODD",
    ]


def test_print_allocation_summary(capsys):
    result = allocate([item("1", 60, 40, weight=20, name="Chair")])
    packing_core.print_allocation_summary(result)
    out = capsys.readouterr().out
    assert "Chair" in out
    assert "All items were allocated." in out
