"""
FastAPI application exposing the pallet optimizer.

This module provides a small, well-documented API surface built on top of the
pure-Python core in pallet_api.

Endpoints:
- GET /health
- GET / (service info / version)
- GET /pallets              -> active pallet catalogue
- POST /optimize            -> best pallet for a single item
- POST /optimize/multi      -> allocation of several items to pallets
- POST /carry-price         -> carry-in / carry-out service price

Notes:
- The catalogue, rate table and surcharges are resolved once at import time
  through `pallet_api.config.get_config` (PALLET_API_CONFIG_DIR or defaults).
- Request validation happens here; the computational core trusts its input.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__ as PACKAGE_VERSION
from . import config
from .models import (
    CalculationRequest,
    CarryPriceRead,
    CarryPriceRequest,
    MultiItemRequest,
    MultiItemResultRead,
    OptimizerResultRead,
    PalletTypeRead,
    calculation_to_item,
    itemcreate_to_dataclass,
    multi_item_result_from_dataclass,
    optimizer_result_from_dataclass,
    options_to_dataclass,
)
from .optimizer import optimize
from .packing import optimize_multi_item
from .pricing import calculate_carry_price

logger = logging.getLogger("pallet_api")
logging.basicConfig(level=logging.INFO)

pricing_config = config.get_config()

app = FastAPI(
    title="pallet_api - pallet optimizer",
    version=PACKAGE_VERSION,
    description="Cheapest pallet recommendation and multi-item pallet allocation.",
)

# Allow cross-origin calls for common dev scenarios (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------
# Health & info endpoints
# ---------------------------


@app.get("/", summary="Service info")
async def root() -> Dict[str, Any]:
    """
    Basic service information and version.
    """
    return {
        "service": "pallet_api",
        "version": PACKAGE_VERSION,
        "rates_valid_from": pricing_config.surcharges.valid_from,
        "rates_valid_to": pricing_config.surcharges.valid_to,
    }


@app.get("/health", summary="Health check")
async def health() -> Dict[str, str]:
    """
    Simple health check endpoint.
    """
    return {"status": "ok"}


@app.get("/pallets", response_model=List[PalletTypeRead], summary="Pallet catalogue")
async def list_pallets() -> List[PalletTypeRead]:
    return [PalletTypeRead.model_validate(p) for p in pricing_config.pallet_types]


# ---------------------------
# Optimizer endpoints
# ---------------------------


@app.post(
    "/optimize",
    response_model=OptimizerResultRead,
    summary="Recommend the cheapest pallet for a single item",
)
def optimize_single(request: CalculationRequest) -> OptimizerResultRead:
    """
    Single-item optimizer.

    Response:
    - recommended: cheapest pallet (or null)
    - alternatives: next cheapest pallets
    - rejected: pallets that cannot take the item, with reasons
    """
    item = calculation_to_item(request)
    logger.info(
        "optimize called: %sx%sx%s cm, %s kg, band=%s, options=%s",
        item.length_cm,
        item.width_cm,
        item.height_cm,
        item.weight_kg,
        request.distance_band,
        request.options,
    )

    # Synchronous handler: FastAPI runs the CPU-bound core in its threadpool
    result = optimize(
        item,
        pricing_config.pallet_types,
        pricing_config.rate_table,
        pricing_config.surcharges,
        distance_band=request.distance_band,
        options=options_to_dataclass(request.options),
        packaging_margin_cm=request.packaging_margin_cm,
    )
    return optimizer_result_from_dataclass(result)


@app.post(
    "/optimize/multi",
    response_model=MultiItemResultRead,
    summary="Allocate several items to the cheapest set of pallets",
)
def optimize_multi(request: MultiItemRequest) -> MultiItemResultRead:
    """
    Multi-item allocator.

    Response:
    - allocations: pallets with item placements and price breakdowns
    - pallet_count, total_gross
    - unallocated: items that fit on no pallet
    - warnings
    """
    if not request.items:
        raise HTTPException(status_code=400, detail="`items` must be a non-empty list.")
    if len(request.items) > config.MAX_ITEMS:
        raise HTTPException(
            status_code=400,
            detail=f"At most {config.MAX_ITEMS} items can be allocated at once.",
        )

    items = [itemcreate_to_dataclass(it) for it in request.items]
    logger.info(
        "optimize_multi called: %d items, band=%s, options=%s, margin=%s",
        len(items),
        request.distance_band,
        request.options,
        request.packaging_margin_cm,
    )

    result = optimize_multi_item(
        items,
        pricing_config.pallet_types,
        pricing_config.rate_table,
        pricing_config.surcharges,
        distance_band=request.distance_band,
        options=options_to_dataclass(request.options),
        packaging_margin_cm=request.packaging_margin_cm,
    )

    summary: Dict[str, Any] = {
        "requested_items": len(items),
        "allocated_items": sum(len(a.items) for a in result.allocations),
        "unallocated_count": len(result.unallocated),
    }
    return multi_item_result_from_dataclass(result, summary=summary)


@app.post(
    "/carry-price",
    response_model=CarryPriceRead,
    summary="Price of the carry-in / carry-out service for one item",
)
async def carry_price(request: CarryPriceRequest) -> CarryPriceRead:
    result = calculate_carry_price(
        request.weight_kg, request.length_cm, request.width_cm, request.height_cm
    )
    return CarryPriceRead.model_validate(result)


# ---------------------------
# Exception handlers & utilities
# ---------------------------


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Basic generic handler to ensure JSON responses for unexpected errors.
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
