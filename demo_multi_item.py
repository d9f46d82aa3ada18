from pallet_api.config import get_config
from pallet_api.models import FurnitureItem
from pallet_api.packing import optimize_multi_item, print_allocation_summary
from pallet_api.plotter import visualize_allocations

if __name__ == "__main__":
    cfg = get_config()

    # Define a LIST of furniture items to ship together
    items = [
        FurnitureItem("sofa", 200, 90, 80, 65, name="Sofa"),
        FurnitureItem("table", 110, 70, 75, 40, name="Table"),
        FurnitureItem("chair-1", 45, 45, 90, 6, name="Chair 1"),
        FurnitureItem("chair-2", 45, 45, 90, 6, name="Chair 2"),
        FurnitureItem("drawers", 200, 45, 90, 60, name="Chest of drawers"),
        # FurnitureItem("wardrobe", 300, 250, 240, 180, name="Wardrobe"),
    ]

    result = optimize_multi_item(
        items,
        cfg.pallet_types,
        cfg.rate_table,
        cfg.surcharges,
        distance_band="LE_100",
        packaging_margin_cm=5,
    )

    print("=" * 50)
    print_allocation_summary(result)
    for w in result.warnings:
        print(f"! {w}")

    # Visualize
    visualize_allocations(result)
