"""
Smoke tests for the allocation plotter (non-interactive Agg backend).
"""

import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from pallet_api import models as m  # noqa: E402
from pallet_api import plotter  # noqa: E402
from pallet_api.packing import optimize_multi_item  # noqa: E402
from pallet_api.config import default_config  # noqa: E402


def example_result():
    cfg = default_config()
    items = [
        m.FurnitureItem("1", 40, 40, 50, 10, name="Stool"),
        m.FurnitureItem("2", 50, 40, 60, 15, name="Cabinet"),
    ]
    return optimize_multi_item(
        items, cfg.pallet_types, cfg.rate_table, cfg.surcharges
    )


def test_draw_allocation_adds_one_patch_per_item_plus_pallet():
    result = example_result()
    allocation = result.allocations[0]
    fig, ax = plt.subplots()
    plotter.draw_allocation(ax, allocation)
    assert len(ax.patches) == len(allocation.items) + 1
    # y axis is inverted so the origin sits at the top-left corner
    bottom, top = ax.get_ylim()
    assert bottom > top
    plt.close(fig)


def test_visualize_without_allocations_prints_message(capsys):
    empty = m.MultiItemResult(allocations=[], pallet_count=0, total_gross="0.00")
    plotter.visualize_allocations(empty)
    assert "No pallets to visualize." in capsys.readouterr().out
