# pallet_api/packer.py
"""
2D rectangle packing on a flat pallet surface (MaxRects, best short side fit).

The free space is tracked as a list of possibly overlapping free rectangles.
Each placement splits every free rectangle it touches into up to four
fragments and then drops fragments contained in another one.

The free-rectangle list is passed explicitly between the helpers below and a
fresh list is created for every `RectanglePacker.pack` call, so a packer
instance only holds the surface size and can be reused safely.

Coordinates: origin at the top-left corner, x to the right, y downwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import inf
from typing import Iterable, List, Optional, Tuple

from .models import PackedItem, PackRect


@dataclass(frozen=True)
class FreeRect:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h


def rects_intersect(a: FreeRect, b: FreeRect) -> bool:
    """Strict overlap test: touching edges do not count."""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def is_contained(a: FreeRect, b: FreeRect) -> bool:
    """True if `a` lies within `b` (inclusive bounds)."""
    return a.x >= b.x and a.y >= b.y and a.right <= b.right and a.bottom <= b.bottom


def find_best_node(
    free_rects: List[FreeRect], w: float, h: float
) -> Optional[PackedItem]:
    """
    Best-short-side-fit search over all free rectangles, both orientations.

    Candidates are scored by (shorter leftover side, longer leftover side);
    only a strictly better score replaces the current best, so ties keep the
    earliest free rectangle and prefer the unrotated orientation.
    Returns a PackedItem without id, or None if nothing fits.
    """
    best: Optional[PackedItem] = None
    best_score: Tuple[float, float] = (inf, inf)

    for fr in free_rects:
        for width, height, rotated in ((w, h, False), (h, w, True)):
            if fr.w < width or fr.h < height:
                continue
            leftover_horiz = abs(fr.w - width)
            leftover_vert = abs(fr.h - height)
            score = (
                min(leftover_horiz, leftover_vert),
                max(leftover_horiz, leftover_vert),
            )
            if score < best_score:
                best_score = score
                best = PackedItem(
                    id="", x=fr.x, y=fr.y, width=width, height=height, rotated=rotated
                )

    return best


def split_free_rect(fr: FreeRect, used: FreeRect) -> List[FreeRect]:
    """
    Fragments of `fr` left free around `used` (above, below, left, right).
    Fragments may overlap each other; zero-area fragments are dropped.
    """
    fragments: List[FreeRect] = []

    if used.x < fr.right and used.right > fr.x:
        if fr.y < used.y < fr.bottom:
            fragments.append(FreeRect(fr.x, fr.y, fr.w, used.y - fr.y))
        if used.bottom < fr.bottom:
            fragments.append(FreeRect(fr.x, used.bottom, fr.w, fr.bottom - used.bottom))

    if used.y < fr.bottom and used.bottom > fr.y:
        if fr.x < used.x < fr.right:
            fragments.append(FreeRect(fr.x, fr.y, used.x - fr.x, fr.h))
        if used.right < fr.right:
            fragments.append(FreeRect(used.right, fr.y, fr.right - used.right, fr.h))

    return [f for f in fragments if f.w > 0 and f.h > 0]


def prune_free_rects(free_rects: List[FreeRect]) -> List[FreeRect]:
    """
    Remove every free rectangle contained in another one. Of two identical
    rectangles the later one survives.
    """
    pruned = list(free_rects)
    i = 0
    while i < len(pruned):
        if any(
            j != i and is_contained(pruned[i], pruned[j]) for j in range(len(pruned))
        ):
            del pruned[i]
        else:
            i += 1
    return pruned


def split_free_rects(free_rects: List[FreeRect], used: FreeRect) -> List[FreeRect]:
    """Free-rectangle list after committing `used`."""
    updated: List[FreeRect] = []
    for fr in free_rects:
        if rects_intersect(used, fr):
            updated.extend(split_free_rect(fr, used))
        else:
            updated.append(fr)
    return prune_free_rects(updated)


class RectanglePacker:
    """
    MaxRects packer for a fixed-size surface.

    Usage:
        packer = RectanglePacker(80, 120)
        placements = packer.pack([PackRect("a", 60, 40), PackRect("b", 75, 60)])
        # -> list of PackedItem, or None if the set does not fit
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def pack(self, items: Iterable[PackRect]) -> Optional[List[PackedItem]]:
        """
        Place all `items` or none of them.

        Items are processed largest side first (stable for equal sides).
        Placements are never revisited; the first item that cannot be placed
        makes the whole call return None.
        """
        free_rects = [FreeRect(0, 0, self.width, self.height)]
        packed: List[PackedItem] = []

        for item in sorted(items, key=lambda it: max(it.w, it.h), reverse=True):
            node = find_best_node(free_rects, item.w, item.h)
            if node is None:
                return None

            node.id = item.id
            packed.append(node)
            free_rects = split_free_rects(
                free_rects, FreeRect(node.x, node.y, node.width, node.height)
            )

        return packed


__all__ = [
    "FreeRect",
    "RectanglePacker",
    "find_best_node",
    "split_free_rect",
    "split_free_rects",
    "prune_free_rects",
    "rects_intersect",
    "is_contained",
]
