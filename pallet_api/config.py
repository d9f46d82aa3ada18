"""
Configuration for pallet_api: business constants, the default catalogue and
tariff, and loading of catalogue/tariff files from disk.

Configuration files use the same camelCase layout as the pricing team's
exports:
- pallet-types.json  {"pallets": [{"id", "lengthM", "widthM", ...}]}
- rate-table.json    {"categories": {"STANDARD": {"tiers": [...]}, ...}}
- surcharges.json    {"fuelPercent", "roadPercent", "vatPercent", ...}

Set PALLET_API_CONFIG_DIR to a directory holding these three files to replace
the built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, List, Optional

from .models import (
    PalletType,
    PalletTypesConfig,
    RateTable,
    RateTableConfig,
    Surcharges,
    SurchargesConfig,
    pallettype_from_config,
    ratetable_from_config,
    surcharges_from_config,
)

logger = logging.getLogger(__name__)

# ----------------------------
# Business constants
# ----------------------------

VAT_PERCENT: Final[float] = 23.0
MINIMUM_NET_PRICE: Final[float] = 40.0
CURRENCY: Final[str] = "PLN"

# Height of the pallet itself; items share the height limit with it.
PALLET_BASE_HEIGHT_CM: Final[float] = 15.0

ABSOLUTE_MAX_HEIGHT_CM: Final[float] = 220.0
ABSOLUTE_MAX_WEIGHT_KG: Final[float] = 1500.0
VAN35_MAX_HEIGHT_CM: Final[float] = 180.0
VAN35_MAX_WEIGHT_KG: Final[float] = 400.0
LIFT_MAX_WEIGHT_KG: Final[float] = 750.0

NEAR_HEIGHT_MARGIN_CM: Final[float] = 10.0
NEAR_WEIGHT_THRESHOLD_PERCENT: Final[float] = 5.0

# Weight used to rank pallet types by tariff before any packing happens.
RATE_SORT_PROBE_WEIGHT_KG: Final[float] = 50.0

# Largest group of items tried together on one pallet in the greedy phase.
MULTI_ITEM_WINDOW: Final[int] = 4

MAX_ITEMS: Final[int] = 10
DEFAULT_PACKAGING_MARGIN_CM: Final[float] = 5.0
OPTIMIZER_ALTERNATIVES: Final[int] = 3

CONFIG_DIR_ENV: Final[str] = "PALLET_API_CONFIG_DIR"

PALLET_TYPES_FILE: Final[str] = "pallet-types.json"
RATE_TABLE_FILE: Final[str] = "rate-table.json"
SURCHARGES_FILE: Final[str] = "surcharges.json"

# ----------------------------
# Built-in defaults
# ----------------------------

DEFAULT_PALLET_TYPES_DATA = {
    "pallets": [
        {"id": "STANDARD_120x80", "displayName": "Euro pallet 120x80", "lengthM": 1.2, "widthM": 0.8,
         "maxHeightCm": 220, "maxWeightKg": 1500, "category": "STANDARD"},
        {"id": "HALF_80x60", "displayName": "Half pallet 80x60", "lengthM": 0.8, "widthM": 0.6,
         "maxHeightCm": 220, "maxWeightKg": 150, "category": "HALF"},
        {"id": "LONG_WIDE_240x80", "displayName": "Long pallet 240x80", "lengthM": 2.4, "widthM": 0.8,
         "maxHeightCm": 220, "maxWeightKg": 300, "category": "LONG_WIDE"},
        {"id": "LONG_NARROW_265x45", "displayName": "Long narrow pallet 265x45", "lengthM": 2.65,
         "widthM": 0.45, "maxHeightCm": 220, "maxWeightKg": 200, "category": "LONG_NARROW"},
        {"id": "PALLET_120_120", "displayName": "Pallet 120x120", "lengthM": 1.2, "widthM": 1.2,
         "maxHeightCm": 220, "maxWeightKg": 300, "category": "PALLET_120_120"},
    ]
}

DEFAULT_RATE_TABLE_DATA = {
    "categories": {
        "STANDARD": {
            "tiers": [
                {"maxWeightKg": 100, "rates": {"LE_100": 67, "KM_101_300": 74, "KM_301_500": 75, "GT_500": 84}},
                {"maxWeightKg": 300, "rates": {"LE_100": 79, "KM_101_300": 100, "KM_301_500": 108, "GT_500": 119}},
                {"maxWeightKg": 600, "rates": {"LE_100": 110, "KM_101_300": 139, "KM_301_500": 150, "GT_500": 166}},
                {"maxWeightKg": 1000, "rates": {"LE_100": 151, "KM_101_300": 190, "KM_301_500": 205, "GT_500": 228}},
                {"maxWeightKg": 1500, "rates": {"LE_100": 198, "KM_101_300": 249, "KM_301_500": 269, "GT_500": 299}},
            ]
        },
        "HALF": {
            "tiers": [
                {"maxWeightKg": 150, "rates": {"LE_100": 65, "KM_101_300": 66, "KM_301_500": 66, "GT_500": 67}},
            ]
        },
        "LONG_WIDE": {
            "tiers": [
                {"maxWeightKg": 300, "rates": {"LE_100": 136, "KM_101_300": 155, "KM_301_500": 157, "GT_500": 175}},
            ]
        },
        "LONG_NARROW": {
            "tiers": [
                {"maxWeightKg": 200, "rates": {"LE_100": 120, "KM_101_300": 149, "KM_301_500": 163, "GT_500": 184}},
            ]
        },
        "PALLET_120_120": {
            "tiers": [
                {"maxWeightKg": 300, "rates": {"LE_100": 94, "KM_101_300": 108, "KM_301_500": 120, "GT_500": 130}},
            ]
        },
    }
}

DEFAULT_SURCHARGES_DATA = {
    "fuelPercent": 20.02,
    "roadPercent": 14.43,
    "vatPercent": VAT_PERCENT,
    "minimumNetPrice": MINIMUM_NET_PRICE,
    "validFrom": "2026-01-01",
    "validTo": "2026-12-31",
}


@dataclass
class PricingConfig:
    """Everything a calculation needs besides the request itself."""

    pallet_types: List[PalletType]
    rate_table: RateTable
    surcharges: Surcharges


def parse_config(pallet_types_data, rate_table_data, surcharges_data) -> PricingConfig:
    """
    Validate raw JSON-like data and convert it to core dataclasses.

    Raises pydantic.ValidationError on malformed data. Unknown rate categories
    are not rejected here: pallets referencing them are later reported with
    NO_RATE_MATCH.
    """
    pallets = PalletTypesConfig.model_validate(pallet_types_data)
    rates = RateTableConfig.model_validate(rate_table_data)
    surcharges = SurchargesConfig.model_validate(surcharges_data)
    return PricingConfig(
        pallet_types=[pallettype_from_config(p) for p in pallets.pallets],
        rate_table=ratetable_from_config(rates),
        surcharges=surcharges_from_config(surcharges),
    )


def _read_json(path: Path):
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_config(config_dir) -> PricingConfig:
    """
    Load the catalogue, rate table and surcharges from `config_dir`.

    Raises FileNotFoundError if one of the three files is missing.
    """
    base = Path(config_dir)
    logger.info("Loading pricing configuration from %s", base)
    return parse_config(
        _read_json(base / PALLET_TYPES_FILE),
        _read_json(base / RATE_TABLE_FILE),
        _read_json(base / SURCHARGES_FILE),
    )


def default_config() -> PricingConfig:
    """Built-in catalogue and tariff."""
    return parse_config(
        DEFAULT_PALLET_TYPES_DATA, DEFAULT_RATE_TABLE_DATA, DEFAULT_SURCHARGES_DATA
    )


def get_config(config_dir: Optional[str] = None) -> PricingConfig:
    """
    Resolve the active configuration: explicit directory, then the
    PALLET_API_CONFIG_DIR environment variable, then built-in defaults.
    """
    config_dir = config_dir or os.getenv(CONFIG_DIR_ENV)
    if config_dir:
        return load_config(config_dir)
    return default_config()
