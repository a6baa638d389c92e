"""Nutrition lookup API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, Request, status

from nutrition_resolver.api.models import (
    BarcodePayload,
    BatchLookupRequest,
    BatchLookupResponse,
    NutritionPayload,
)

if TYPE_CHECKING:
    from nutrition_resolver.containers import AppContainer

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


@router.get("/lookup")
async def lookup(request: Request, name: str = Query(min_length=1)) -> NutritionPayload:
    """Resolve a free-text food name."""
    container: AppContainer = request.app.state.container
    data = await container.nutrition_service.lookup_by_text(name)
    if data is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Nutrition data not found"
        )
    return NutritionPayload.from_data(data)


@router.get("/barcode/{code}")
async def barcode(code: str, request: Request) -> BarcodePayload:
    """Resolve a scanned barcode."""
    container: AppContainer = request.app.state.container
    result = await container.barcode_service.lookup_by_barcode(code)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return BarcodePayload.from_result(result)


@router.post("/batch")
async def batch(payload: BatchLookupRequest, request: Request) -> BatchLookupResponse:
    """Resolve several free-text names at once."""
    container: AppContainer = request.app.state.container
    limit = container.settings.batch_max_queries
    if len(payload.queries) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"At most {limit} queries per batch",
        )
    results = await container.nutrition_service.batch_lookup_by_text(payload.queries)
    return BatchLookupResponse(
        results={
            query: NutritionPayload.from_data(data) if data is not None else None
            for query, data in results.items()
        }
    )
