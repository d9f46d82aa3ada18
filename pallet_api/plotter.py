"""
Top-down visualization helpers for pallet allocations.

Features:
- Pallet surface drawn as an outlined rectangle (x = width, y = length).
- Items as coloured rectangles with their name and orientation.
- Previous/Next buttons to navigate between pallets.
- Text summary (pallet + unallocated items) inside the window.

Requires:
    matplotlib
"""

from typing import List

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
from matplotlib.widgets import Button

from .fitting import pallet_dimensions_to_cm, round_cm
from .models import MultiItemResult, PalletAllocation, UnallocatedItem
from .pricing import format_price

COLORS = [
    "tab:blue", "tab:orange", "tab:green", "tab:red",
    "tab:purple", "tab:brown", "tab:pink", "tab:gray",
]


def draw_pallet(ax, width, length, color="burlywood", alpha=0.3):
    """
    Draw the pallet surface.
    """
    ax.add_patch(Rectangle((0, 0), width, length, facecolor=color,
                           edgecolor="k", linewidth=1.5, alpha=alpha))


def draw_placement(ax, x, y, width, length, label: str,
                   color="tab:blue", alpha=0.6):
    """
    Draw one item footprint and write its label in the middle.
    """
    ax.add_patch(Rectangle((x, y), width, length, facecolor=color,
                           edgecolor="k", linewidth=0.5, alpha=alpha))
    ax.text(x + width / 2.0, y + length / 2.0, label,
            ha="center", va="center", fontsize=8, color="black")


def draw_allocation(ax, allocation: PalletAllocation) -> None:
    """
    Draw a whole allocation on `ax`. Works with any backend, including Agg.
    """
    length_cm, width_cm = pallet_dimensions_to_cm(allocation.pallet)
    width = round_cm(width_cm)
    length = round_cm(length_cm)

    draw_pallet(ax, width, length)
    for idx, pl in enumerate(allocation.items):
        draw_placement(ax, pl.position_x, pl.position_y,
                       pl.footprint_width_cm, pl.footprint_length_cm,
                       f"{pl.item.name}\n{pl.orientation_label}",
                       color=COLORS[idx % len(COLORS)])

    ax.set_xlim(0, width)
    # y grows downwards, as on the printed layout sheet
    ax.set_ylim(length, 0)
    ax.set_aspect("equal")
    ax.set_xlabel("Width (cm)")
    ax.set_ylabel("Length (cm)")


def _allocation_summary_text(allocation: PalletAllocation) -> str:
    """
    Multi-line text summary for a single pallet.
    """
    pallet = allocation.pallet
    lines = [
        f"Pallet {pallet.display_name}",
        f"Size: {pallet.length_m}m x {pallet.width_m}m",
        f"Weight: {allocation.total_weight_kg} kg",
        f"Price: {format_price(allocation.price_breakdown.gross_total)}",
        "Items:",
    ]
    for pl in allocation.items:
        lines.append(f"  - {pl.item.name} ({pl.height_cm} cm high)")
    return "\n".join(lines)


def _unallocated_summary_text(unallocated: List[UnallocatedItem]) -> str:
    """
    Multi-line summary for items that could not be allocated.
    """
    if not unallocated:
        return "Unallocated items:\n  (none)"
    lines = ["Unallocated items:"]
    for u in unallocated:
        lines.append(f"  - {u.item.name}")
    return "\n".join(lines)


def visualize_allocations(result: MultiItemResult):
    """
    Show a single window with 'Previous' and 'Next' buttons
    to switch between pallets interactively, plus a text summary
    (current pallet + unallocated items).
    """
    allocations = result.allocations
    if not allocations:
        print("No pallets to visualize.")
        return

    state = {"i": 0}

    fig = plt.figure()
    ax = fig.add_subplot(111)
    fig.subplots_adjust(left=0.35, bottom=0.15)

    text_box = {"artist": None}

    def redraw():
        ax.clear()
        allocation = allocations[state["i"]]
        draw_allocation(ax, allocation)
        ax.set_title(f"Pallet {allocation.pallet.display_name} "
                     f"({state['i'] + 1}/{len(allocations)})")

        full_summary = (_allocation_summary_text(allocation) + "\n\n"
                        + _unallocated_summary_text(result.unallocated))

        if text_box["artist"] is not None:
            text_box["artist"].remove()

        text_box["artist"] = fig.text(
            0.01, 0.15, full_summary,
            fontsize=8,
            va="bottom", ha="left",
            bbox=dict(facecolor="white", alpha=0.7, edgecolor="gray")
        )

        plt.draw()

    class Index:
        def next(self, event):
            state["i"] = (state["i"] + 1) % len(allocations)
            redraw()

        def prev(self, event):
            state["i"] = (state["i"] - 1) % len(allocations)
            redraw()

    callback = Index()

    axprev = fig.add_axes([0.4, 0.02, 0.1, 0.05])
    axnext = fig.add_axes([0.7, 0.02, 0.1, 0.05])

    bprev = Button(axprev, "Previous")
    bprev.on_clicked(callback.prev)

    bnext = Button(axnext, "Next")
    bnext.on_clicked(callback.next)

    redraw()
    plt.show()
