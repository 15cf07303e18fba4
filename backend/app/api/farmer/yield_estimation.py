# backend/app/api/farmer/yield_estimation.py

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logger import logger
from app.crud.farmer import saved_inputs as crud_saved
from app.schemas.farmer.yield_estimation import (
    EstimationInput,
    EstimationResult,
    SavedEstimationInputOut,
    YieldModelConfig,
)
from app.services.farmer.yield_estimation_service import YieldEstimator, get_estimator

router = APIRouter(prefix="/yield", tags=["farmer-yield"])


def _saved_out(row) -> SavedEstimationInputOut:
    return SavedEstimationInputOut(
        storage_key=row.storage_key,
        input=crud_saved.to_estimation_input(row),
        updated_at=row.updated_at,
    )


@router.post("/estimate", response_model=EstimationResult)
async def api_estimate_yield(
    payload: EstimationInput,
    owner_id: Optional[str] = Query(None, min_length=1, max_length=128),
    db: AsyncSession = Depends(get_db),
    estimator: YieldEstimator = Depends(get_estimator),
):
    """
    Estimate per-acre and total yield (quintals) with a confidence label.
    When owner_id is given the input is also remembered for form pre-fill.
    """
    result = estimator.estimate(payload)

    if owner_id:
        key = crud_saved.storage_key_for(owner_id)
        await crud_saved.upsert_saved_input(key, payload, db)
        logger.info("Saved estimator input", extra={"storage_key": key})

    return result


@router.get("/model", response_model=YieldModelConfig)
def api_yield_model(estimator: YieldEstimator = Depends(get_estimator)):
    # known crops + factor constants, for the UI dropdowns / help text
    return estimator.config


@router.get("/saved-input/{owner_id}", response_model=SavedEstimationInputOut)
async def api_get_saved_input(owner_id: str, db: AsyncSession = Depends(get_db)):
    row = await crud_saved.get_saved_input(crud_saved.storage_key_for(owner_id), db)
    if not row:
        raise HTTPException(status_code=404, detail="saved_input_not_found")
    return _saved_out(row)


@router.put("/saved-input/{owner_id}", response_model=SavedEstimationInputOut)
async def api_put_saved_input(
    owner_id: str,
    payload: EstimationInput,
    db: AsyncSession = Depends(get_db),
):
    key = crud_saved.storage_key_for(owner_id)
    row = await crud_saved.upsert_saved_input(key, payload, db)
    logger.info("Saved estimator input", extra={"storage_key": key})
    return _saved_out(row)


@router.delete("/saved-input/{owner_id}")
async def api_delete_saved_input(owner_id: str, db: AsyncSession = Depends(get_db)):
    key = crud_saved.storage_key_for(owner_id)
    if not await crud_saved.delete_saved_input(key, db):
        raise HTTPException(status_code=404, detail="saved_input_not_found")

    logger.info("Deleted saved estimator input", extra={"storage_key": key})
    return {"status": "deleted", "storage_key": key}
