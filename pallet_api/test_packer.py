"""
Tests for the MaxRects rectangle packer.

Covers the documented scenarios plus randomized invariant checks
(no overlap, containment, rotation symmetry). Randomness is seeded.
"""

import random

from pallet_api.models import PackRect
from pallet_api.packer import (
    FreeRect,
    RectanglePacker,
    prune_free_rects,
    split_free_rect,
)


def rects(*sizes):
    return [PackRect(id=str(i), w=w, h=h) for i, (w, h) in enumerate(sizes)]


def assert_valid_layout(result, width, height):
    for p in result:
        assert p.x >= 0 and p.y >= 0
        assert p.x + p.width <= width
        assert p.y + p.height <= height
    for i, a in enumerate(result):
        for b in result[i + 1 :]:
            assert (
                a.x + a.width <= b.x
                or b.x + b.width <= a.x
                or a.y + a.height <= b.y
                or b.y + b.height <= a.y
            ), f"{a} overlaps {b}"


def test_single_item_at_origin():
    result = RectanglePacker(100, 100).pack(rects((50, 50)))
    assert result is not None
    assert len(result) == 1
    p = result[0]
    assert (p.x, p.y, p.width, p.height, p.rotated) == (0, 0, 50, 50, False)


def test_two_items_side_by_side():
    result = RectanglePacker(100, 100).pack(rects((50, 100), (50, 100)))
    assert result is not None
    assert (result[0].width, result[0].height) == (50, 100)
    assert (result[1].x, result[1].y, result[1].width, result[1].height) == (50, 0, 50, 100)


def test_rotates_item_to_fit():
    result = RectanglePacker(100, 50).pack(rects((50, 100)))
    assert result is not None
    assert result[0].rotated is True
    assert (result[0].width, result[0].height) == (100, 50)


def test_returns_none_when_item_too_large():
    assert RectanglePacker(50, 50).pack(rects((60, 60))) is None


def test_returns_none_when_set_does_not_fit_together():
    # each fits alone, both do not
    assert RectanglePacker(80, 120).pack(rects((75, 115), (75, 115))) is None


def test_complex_layout_fills_surface():
    result = RectanglePacker(100, 100).pack(rects((50, 50), (50, 50), (100, 50)))
    assert result is not None
    assert len(result) == 3
    assert sum(p.width * p.height for p in result) == 50 * 50 + 50 * 50 + 100 * 50
    assert_valid_layout(result, 100, 100)


def test_largest_side_is_placed_first():
    result = RectanglePacker(100, 100).pack(rects((10, 10), (90, 20)))
    assert [p.id for p in result] == ["1", "0"]


def test_empty_input_packs_to_empty_list():
    assert RectanglePacker(10, 10).pack([]) == []


def test_packer_instance_can_be_reused():
    packer = RectanglePacker(100, 100)
    items = rects((60, 40), (40, 60), (30, 30))
    first = packer.pack(items)
    second = packer.pack(items)
    assert first == second


def test_random_layouts_never_overlap_and_stay_inside():
    rng = random.Random(20260101)
    packed_any = 0
    for _ in range(300):
        width, height = rng.randint(40, 150), rng.randint(40, 150)
        sizes = [(rng.randint(5, 80), rng.randint(5, 80)) for _ in range(rng.randint(1, 7))]
        result = RectanglePacker(width, height).pack(rects(*sizes))
        if result is None:
            continue
        packed_any += 1
        assert len(result) == len(sizes)
        for p in result:
            w, h = sizes[int(p.id)]
            assert (p.width, p.height) == ((h, w) if p.rotated else (w, h))
        assert_valid_layout(result, width, height)
    assert packed_any > 0


def test_single_item_rotation_symmetry():
    rng = random.Random(7)
    for _ in range(200):
        width, height = rng.randint(10, 120), rng.randint(10, 120)
        w, h = rng.randint(5, 130), rng.randint(5, 130)
        straight = RectanglePacker(width, height).pack(rects((w, h)))
        swapped = RectanglePacker(height, width).pack(rects((h, w)))
        assert (straight is None) == (swapped is None)


# ----------------------------
# Free-rectangle helpers
# ----------------------------


def test_split_corner_placement():
    fragments = split_free_rect(FreeRect(0, 0, 100, 100), FreeRect(0, 0, 50, 50))
    assert fragments == [FreeRect(0, 50, 100, 50), FreeRect(50, 0, 50, 100)]


def test_split_centre_placement_yields_four_fragments():
    fragments = split_free_rect(FreeRect(0, 0, 100, 100), FreeRect(25, 25, 50, 50))
    assert fragments == [
        FreeRect(0, 0, 100, 25),
        FreeRect(0, 75, 100, 25),
        FreeRect(0, 0, 25, 100),
        FreeRect(75, 0, 25, 100),
    ]


def test_split_exact_fill_leaves_nothing():
    assert split_free_rect(FreeRect(0, 0, 10, 10), FreeRect(0, 0, 10, 10)) == []


def test_prune_removes_contained_rects():
    small, big = FreeRect(0, 0, 10, 10), FreeRect(0, 0, 20, 20)
    assert prune_free_rects([small, big]) == [big]


def test_prune_keeps_one_of_identical_rects():
    assert prune_free_rects([FreeRect(0, 0, 5, 5), FreeRect(0, 0, 5, 5)]) == [
        FreeRect(0, 0, 5, 5)
    ]
