# pallet_api/models.py
"""
Core datamodels for pallet_api.

This module provides:
- Dataclass-based core models used by the fitting, packing and pricing engine.
- Pydantic models used for API input/output and for configuration files.
- Small conversion helpers between dataclasses and pydantic models.

Keep dataclasses free of framework-specific dependencies so they can be used
directly by the algorithms. Pydantic models are thin wrappers for
validation/IO when exposing the functionality through FastAPI or when reading
catalogue files from disk.

Units: item dimensions in centimetres, pallet footprint in metres, weights in
kilograms, money as decimal strings with two places.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ----------------------------
# Enumerations
# ----------------------------

DistanceBand = Literal["LE_100", "KM_101_300", "KM_301_500", "GT_500"]

RateCategory = Literal[
    "STANDARD", "HALF", "LONG_WIDE", "LONG_NARROW", "PALLET_120_120"
]

RejectionReason = Literal["OVERHANG", "HEIGHT_LIMIT", "WEIGHT_LIMIT", "NO_RATE_MATCH"]

ItemOrientation = Literal[
    "normal",
    "rotated",
    "tiltedOnSide",
    "tiltedOnSideRotated",
    "tiltedOnEnd",
    "tiltedOnEndRotated",
]

DISTANCE_BANDS = ("LE_100", "KM_101_300", "KM_301_500", "GT_500")

ORIENTATION_LABELS: Dict[str, str] = {
    "normal": "Upright",
    "rotated": "Rotated on pallet",
    "tiltedOnSide": "Laid on its side",
    "tiltedOnSideRotated": "On its side + rotated",
    "tiltedOnEnd": "Stood on end",
    "tiltedOnEndRotated": "On end + rotated",
}

# ----------------------------
# Dataclass core models
# ----------------------------


@dataclass
class FurnitureItem:
    """
    A single piece of furniture to ship.

    Attributes:
    - id: opaque identifier, unique within one request
    - length_cm, width_cm, height_cm: measured dimensions (cm)
    - weight_kg: gross weight (kg)
    - name: optional display name, defaults to the id
    """

    id: str
    length_cm: float
    width_cm: float
    height_cm: float
    weight_kg: float
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.name is None:
            self.name = self.id
        for attr in ("length_cm", "width_cm", "height_cm", "weight_kg"):
            if getattr(self, attr) <= 0:
                raise ValueError(f"FurnitureItem.{attr} must be positive")

    def footprint_area(self, margin_cm: float = 0.0) -> float:
        """Floor area of the upright item with packaging margin on both sides."""
        return (self.length_cm + margin_cm) * (self.width_cm + margin_cm)


@dataclass
class PalletType:
    """
    Pallet (transport unit) definition from the catalogue.

    Footprint is given in metres; height and weight ceilings are the pallet's
    own limits before transport-mode overrides are applied.
    """

    id: str
    length_m: float
    width_m: float
    max_height_cm: float
    max_weight_kg: float
    category: str
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.display_name is None:
            self.display_name = self.id


@dataclass
class RateTier:
    """Weight tier of a rate category: applies up to `max_weight_kg` inclusive."""

    max_weight_kg: float
    rates: Dict[str, float] = field(default_factory=dict)


@dataclass
class RateTable:
    """Tiered rates per category. Tiers are kept in configuration order."""

    categories: Dict[str, List[RateTier]] = field(default_factory=dict)


@dataclass
class Surcharges:
    fuel_percent: float
    road_percent: float
    vat_percent: float
    minimum_net_price: float
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None
    notes: Dict[str, str] = field(default_factory=dict)


@dataclass
class TransportOptions:
    """
    Transport-mode switches.

    - lift: a tail-lift truck is required (caps weight)
    - van35: the shipment goes by a 3.5-tonne van (caps height and weight)
    """

    lift: bool = False
    van35: bool = False


@dataclass
class EffectiveLimits:
    max_height_cm: float
    max_weight_kg: float


@dataclass
class FitResult:
    """Outcome of fitting one cuboid onto one pallet footprint."""

    fits: bool
    orientation: str = "normal"
    rotated: bool = False

    @property
    def label(self) -> str:
        return ORIENTATION_LABELS[self.orientation]

    @property
    def tilted(self) -> bool:
        return "tilted" in self.orientation


@dataclass
class PackRect:
    """Rectangle request handed to the 2D packer."""

    id: str
    w: int
    h: int


@dataclass
class PackedItem:
    """
    Rectangle placed by the 2D packer.

    - x, y: top-left corner in the surface frame (x rightward, y downward)
    - width, height: dimensions actually used (swapped when rotated)
    """

    id: str
    x: float
    y: float
    width: int
    height: int
    rotated: bool = False


@dataclass
class PriceBreakdown:
    """All amounts are fixed two-decimal strings."""

    base_rate: str
    after_minimum: str
    fuel_surcharge: str
    road_surcharge: str
    net_total: str
    vat: str
    gross_total: str

    @property
    def gross(self) -> Decimal:
        return Decimal(self.gross_total)


@dataclass
class MatchResult:
    pallet: PalletType
    fits_rotated: bool
    orientation_label: Optional[str]
    price_breakdown: PriceBreakdown
    warnings: List[str] = field(default_factory=list)


@dataclass
class RejectedResult:
    pallet: PalletType
    reasons: List[str] = field(default_factory=list)


@dataclass
class OptimizerResult:
    recommended: Optional[MatchResult]
    alternatives: List[MatchResult] = field(default_factory=list)
    rejected: List[RejectedResult] = field(default_factory=list)


@dataclass
class ItemPlacement:
    """
    Concrete placement of one item on one pallet.

    - footprint_width_cm: extent along the pallet width (x axis)
    - footprint_length_cm: extent along the pallet length (y axis)
    - height_cm: resulting height of the item in its orientation
    - position_x, position_y: top-left corner after centering
    """

    item: FurnitureItem
    orientation: str
    orientation_label: str
    warnings: List[str]
    footprint_width_cm: int
    footprint_length_cm: int
    height_cm: int
    position_x: float
    position_y: float


@dataclass
class PalletAllocation:
    pallet: PalletType
    items: List[ItemPlacement]
    total_weight_kg: float
    price_breakdown: PriceBreakdown
    layout_notes: List[str] = field(default_factory=list)


@dataclass
class UnallocatedItem:
    item: FurnitureItem
    reason: str
    details: str = ""


@dataclass
class MultiItemResult:
    allocations: List[PalletAllocation]
    pallet_count: int
    total_gross: str
    unallocated: List[UnallocatedItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class CarryPriceResult:
    available: bool
    base_price: str
    surcharge: str
    total_net: str
    total_gross: str
    warnings: List[str] = field(default_factory=list)


# ----------------------------
# Pydantic models for configuration files
# ----------------------------


class PalletTypeConfig(BaseModel):
    id: str
    display_name: Optional[str] = Field(None, alias="displayName")
    length_m: float = Field(..., gt=0, alias="lengthM")
    width_m: float = Field(..., gt=0, alias="widthM")
    max_height_cm: float = Field(..., gt=0, alias="maxHeightCm")
    max_weight_kg: float = Field(..., gt=0, alias="maxWeightKg")
    # Unknown categories are accepted here and surface later as NO_RATE_MATCH.
    category: str

    model_config = ConfigDict(populate_by_name=True)


class PalletTypesConfig(BaseModel):
    pallets: List[PalletTypeConfig]


class RateTierConfig(BaseModel):
    max_weight_kg: float = Field(..., gt=0, alias="maxWeightKg")
    rates: Dict[str, float]

    model_config = ConfigDict(populate_by_name=True)


class CategoryRatesConfig(BaseModel):
    tiers: List[RateTierConfig]


class RateTableConfig(BaseModel):
    categories: Dict[str, CategoryRatesConfig]


class SurchargesConfig(BaseModel):
    fuel_percent: float = Field(..., ge=0, alias="fuelPercent")
    road_percent: float = Field(..., ge=0, alias="roadPercent")
    vat_percent: float = Field(..., ge=0, alias="vatPercent")
    minimum_net_price: float = Field(..., ge=0, alias="minimumNetPrice")
    valid_from: Optional[str] = Field(None, alias="validFrom")
    valid_to: Optional[str] = Field(None, alias="validTo")
    notes: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)


# ----------------------------
# Pydantic models for API surface
# ----------------------------

# Input models (Create / Request)


class TransportOptionsCreate(BaseModel):
    lift: bool = False
    van35: bool = False


class FurnitureItemCreate(BaseModel):
    id: str = Field(..., min_length=1, description="Unique id of the item within the request")
    name: Optional[str] = Field(None)
    length_cm: float = Field(..., gt=0)
    width_cm: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)
    weight_kg: float = Field(..., gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "sofa-1",
                "name": "Sofa",
                "length_cm": 200.0,
                "width_cm": 90.0,
                "height_cm": 80.0,
                "weight_kg": 65.0,
            }
        }
    )


class CalculationRequest(BaseModel):
    """Single-item pallet recommendation request."""

    length_cm: float = Field(..., gt=0)
    width_cm: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)
    weight_kg: float = Field(..., gt=0)
    distance_band: DistanceBand = Field("LE_100")
    options: TransportOptionsCreate = Field(default_factory=TransportOptionsCreate)
    packaging_margin_cm: float = Field(5.0, ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "length_cm": 200.0,
                "width_cm": 45.0,
                "height_cm": 90.0,
                "weight_kg": 60.0,
                "distance_band": "KM_101_300",
                "options": {"lift": False, "van35": False},
                "packaging_margin_cm": 5.0,
            }
        }
    )


class MultiItemRequest(BaseModel):
    items: List[FurnitureItemCreate]
    distance_band: DistanceBand = Field("LE_100")
    options: TransportOptionsCreate = Field(default_factory=TransportOptionsCreate)
    packaging_margin_cm: float = Field(5.0, ge=0)

    @field_validator("items")
    @classmethod
    def unique_item_ids(cls, v: List[FurnitureItemCreate]) -> List[FurnitureItemCreate]:
        ids = [it.id for it in v]
        if len(ids) != len(set(ids)):
            raise ValueError("item ids must be unique within a request")
        return v


class CarryPriceRequest(BaseModel):
    weight_kg: float = Field(..., gt=0)
    length_cm: float = Field(..., gt=0)
    width_cm: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)


# Output models (Read / Response)


class PalletTypeRead(BaseModel):
    id: str
    display_name: Optional[str]
    length_m: float
    width_m: float
    max_height_cm: float
    max_weight_kg: float
    category: str

    model_config = ConfigDict(from_attributes=True)


class PriceBreakdownRead(BaseModel):
    base_rate: str
    after_minimum: str
    fuel_surcharge: str
    road_surcharge: str
    net_total: str
    vat: str
    gross_total: str

    model_config = ConfigDict(from_attributes=True)


class MatchResultRead(BaseModel):
    pallet: PalletTypeRead
    fits_rotated: bool
    orientation_label: Optional[str]
    price_breakdown: PriceBreakdownRead
    warnings: List[str]


class RejectedResultRead(BaseModel):
    pallet: PalletTypeRead
    reasons: List[RejectionReason]


class OptimizerResultRead(BaseModel):
    recommended: Optional[MatchResultRead]
    alternatives: List[MatchResultRead]
    rejected: List[RejectedResultRead]


class FurnitureItemRead(BaseModel):
    id: str
    name: Optional[str]
    length_cm: float
    width_cm: float
    height_cm: float
    weight_kg: float

    model_config = ConfigDict(from_attributes=True)


class ItemPlacementRead(BaseModel):
    item: FurnitureItemRead
    orientation: ItemOrientation
    orientation_label: str
    warnings: List[str]
    footprint_width_cm: int
    footprint_length_cm: int
    height_cm: int
    position_x: float
    position_y: float


class PalletAllocationRead(BaseModel):
    pallet: PalletTypeRead
    items: List[ItemPlacementRead]
    total_weight_kg: float
    price_breakdown: PriceBreakdownRead
    layout_notes: List[str]


class UnallocatedItemRead(BaseModel):
    item: FurnitureItemRead
    reason: str
    details: str


class MultiItemResultRead(BaseModel):
    allocations: List[PalletAllocationRead]
    pallet_count: int
    total_gross: str
    unallocated: List[UnallocatedItemRead]
    warnings: List[str]
    summary: Optional[Dict[str, Any]] = None


class CarryPriceRead(BaseModel):
    available: bool
    base_price: str
    surcharge: str
    total_net: str
    total_gross: str
    warnings: List[str]

    model_config = ConfigDict(from_attributes=True)


# ----------------------------
# Conversion helpers
# ----------------------------


def itemcreate_to_dataclass(ic: FurnitureItemCreate) -> FurnitureItem:
    """Convert FurnitureItemCreate (pydantic) to FurnitureItem dataclass."""
    return FurnitureItem(
        id=ic.id,
        name=ic.name or ic.id,
        length_cm=ic.length_cm,
        width_cm=ic.width_cm,
        height_cm=ic.height_cm,
        weight_kg=ic.weight_kg,
    )


def calculation_to_item(req: CalculationRequest, item_id: str = "item") -> FurnitureItem:
    """Build the FurnitureItem described by a single-item calculation request."""
    return FurnitureItem(
        id=item_id,
        length_cm=req.length_cm,
        width_cm=req.width_cm,
        height_cm=req.height_cm,
        weight_kg=req.weight_kg,
    )


def options_to_dataclass(oc: TransportOptionsCreate) -> TransportOptions:
    return TransportOptions(lift=oc.lift, van35=oc.van35)


def pallettype_from_config(pc: PalletTypeConfig) -> PalletType:
    return PalletType(
        id=pc.id,
        length_m=pc.length_m,
        width_m=pc.width_m,
        max_height_cm=pc.max_height_cm,
        max_weight_kg=pc.max_weight_kg,
        category=pc.category,
        display_name=pc.display_name or pc.id,
    )


def ratetable_from_config(rc: RateTableConfig) -> RateTable:
    return RateTable(
        categories={
            category: [
                RateTier(max_weight_kg=t.max_weight_kg, rates=dict(t.rates))
                for t in rates.tiers
            ]
            for category, rates in rc.categories.items()
        }
    )


def surcharges_from_config(sc: SurchargesConfig) -> Surcharges:
    return Surcharges(
        fuel_percent=sc.fuel_percent,
        road_percent=sc.road_percent,
        vat_percent=sc.vat_percent,
        minimum_net_price=sc.minimum_net_price,
        valid_from=sc.valid_from,
        valid_to=sc.valid_to,
        notes=dict(sc.notes),
    )


def _match_to_read(mr: MatchResult) -> MatchResultRead:
    return MatchResultRead(
        pallet=PalletTypeRead.model_validate(mr.pallet),
        fits_rotated=mr.fits_rotated,
        orientation_label=mr.orientation_label,
        price_breakdown=PriceBreakdownRead.model_validate(mr.price_breakdown),
        warnings=list(mr.warnings),
    )


def optimizer_result_from_dataclass(res: OptimizerResult) -> OptimizerResultRead:
    """Convert dataclass OptimizerResult to its Pydantic response model."""
    return OptimizerResultRead(
        recommended=_match_to_read(res.recommended) if res.recommended else None,
        alternatives=[_match_to_read(a) for a in res.alternatives],
        rejected=[
            RejectedResultRead(
                pallet=PalletTypeRead.model_validate(r.pallet),
                reasons=list(r.reasons),
            )
            for r in res.rejected
        ],
    )


def _placement_to_read(pl: ItemPlacement) -> ItemPlacementRead:
    return ItemPlacementRead(
        item=FurnitureItemRead.model_validate(pl.item),
        orientation=pl.orientation,
        orientation_label=pl.orientation_label,
        warnings=list(pl.warnings),
        footprint_width_cm=pl.footprint_width_cm,
        footprint_length_cm=pl.footprint_length_cm,
        height_cm=pl.height_cm,
        position_x=pl.position_x,
        position_y=pl.position_y,
    )


def multi_item_result_from_dataclass(
    res: MultiItemResult, summary: Optional[Dict[str, Any]] = None
) -> MultiItemResultRead:
    """Convert dataclass MultiItemResult to its Pydantic response model."""
    return MultiItemResultRead(
        allocations=[
            PalletAllocationRead(
                pallet=PalletTypeRead.model_validate(a.pallet),
                items=[_placement_to_read(p) for p in a.items],
                total_weight_kg=a.total_weight_kg,
                price_breakdown=PriceBreakdownRead.model_validate(a.price_breakdown),
                layout_notes=list(a.layout_notes),
            )
            for a in res.allocations
        ],
        pallet_count=res.pallet_count,
        total_gross=res.total_gross,
        unallocated=[
            UnallocatedItemRead(
                item=FurnitureItemRead.model_validate(u.item),
                reason=u.reason,
                details=u.details,
            )
            for u in res.unallocated
        ],
        warnings=list(res.warnings),
        summary=summary or {},
    )


# Expose minimal public API from this module
__all__ = [
    "DistanceBand",
    "RateCategory",
    "RejectionReason",
    "ItemOrientation",
    "DISTANCE_BANDS",
    "ORIENTATION_LABELS",
    "FurnitureItem",
    "PalletType",
    "RateTier",
    "RateTable",
    "Surcharges",
    "TransportOptions",
    "EffectiveLimits",
    "FitResult",
    "PackRect",
    "PackedItem",
    "PriceBreakdown",
    "MatchResult",
    "RejectedResult",
    "OptimizerResult",
    "ItemPlacement",
    "PalletAllocation",
    "UnallocatedItem",
    "MultiItemResult",
    "CarryPriceResult",
    "PalletTypesConfig",
    "RateTableConfig",
    "SurchargesConfig",
    "FurnitureItemCreate",
    "CalculationRequest",
    "MultiItemRequest",
    "CarryPriceRequest",
    "OptimizerResultRead",
    "MultiItemResultRead",
    "CarryPriceRead",
    "PalletTypeRead",
    "itemcreate_to_dataclass",
    "calculation_to_item",
    "options_to_dataclass",
    "optimizer_result_from_dataclass",
    "multi_item_result_from_dataclass",
]
