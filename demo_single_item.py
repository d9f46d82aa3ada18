from pallet_api.config import get_config
from pallet_api.models import FurnitureItem, TransportOptions
from pallet_api.optimizer import optimize, print_optimizer_summary
from pallet_api.pricing import calculate_carry_price

if __name__ == "__main__":
    cfg = get_config()

    # A long chest of drawers: only fits when stood on its end
    item = FurnitureItem("drawers", 200, 45, 90, 60, name="Chest of drawers")

    result = optimize(
        item,
        cfg.pallet_types,
        cfg.rate_table,
        cfg.surcharges,
        distance_band="KM_101_300",
        options=TransportOptions(lift=False, van35=False),
        packaging_margin_cm=5,
    )

    print("=" * 50)
    print(f"Item: {item.name} {item.length_cm}x{item.width_cm}x{item.height_cm} cm, "
          f"{item.weight_kg} kg\n")
    print_optimizer_summary(result)

    carry = calculate_carry_price(item.weight_kg, item.length_cm, item.width_cm, item.height_cm)
    print(f"\nCarry-in service: {carry.total_gross} (gross)")
    for w in carry.warnings:
        print(f"  ! {w}")
