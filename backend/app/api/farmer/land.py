# backend/app/api/farmer/land.py

from fastapi import APIRouter, HTTPException, Query

from app.services.farmer.area_conversion_service import (
    UNIT_LABELS,
    conversion_summary,
)

router = APIRouter(prefix="/land", tags=["farmer-land"])


@router.get("/units")
def api_land_units():
    return [{"unit": k, "label": v} for k, v in UNIT_LABELS.items()]


@router.get("/convert")
def api_convert_area(
    value: float = Query(..., ge=0),
    from_unit: str = Query(...),
    to_unit: str = Query(...),
):
    try:
        return conversion_summary(value, from_unit, to_unit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
