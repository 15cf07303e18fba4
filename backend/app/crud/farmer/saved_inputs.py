# backend/app/crud/farmer/saved_inputs.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
from typing import Optional

from app.core.config import settings
from app.core.logger import logger
from app.models.farmer.saved_input import SavedEstimationInput, utcnow
from app.schemas.farmer.yield_estimation import EstimationInput


def storage_key_for(owner_id: str) -> str:
    """Namespaced key, e.g. 'yield_estimator_v1:farmer-42'."""
    return f"{settings.SAVED_INPUT_NAMESPACE}:{str(owner_id).strip()}"


async def get_saved_input(storage_key: str, db: AsyncSession) -> Optional[SavedEstimationInput]:
    return await db.scalar(
        select(SavedEstimationInput).where(SavedEstimationInput.storage_key == storage_key)
    )


async def _overwrite(row: SavedEstimationInput, data: str, db: AsyncSession) -> SavedEstimationInput:
    row.payload = data
    row.updated_at = utcnow()
    await db.commit()
    await db.refresh(row)
    return row


async def upsert_saved_input(
    storage_key: str,
    payload: EstimationInput,
    db: AsyncSession,
) -> SavedEstimationInput:
    """
    Store the last-used estimator input under storage_key,
    replacing whatever was saved before.

    Two first-time saves for the same owner can both miss the lookup;
    the loser of the unique storage_key insert rolls back and updates
    the row the winner created.
    """
    data = payload.model_dump_json(by_alias=True)

    row = await get_saved_input(storage_key, db)
    if row is not None:
        return await _overwrite(row, data, db)

    row = SavedEstimationInput(storage_key=storage_key, payload=data)
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Saved input created concurrently, updating", extra={"storage_key": storage_key})

        row = await get_saved_input(storage_key, db)
        if row is None:
            # the conflicting row is gone again; nothing left to merge with
            raise
        return await _overwrite(row, data, db)

    await db.refresh(row)
    return row


async def delete_saved_input(storage_key: str, db: AsyncSession) -> bool:
    row = await get_saved_input(storage_key, db)
    if row is None:
        return False

    await db.delete(row)
    await db.commit()
    return True


def to_estimation_input(row: SavedEstimationInput) -> EstimationInput:
    return EstimationInput.model_validate_json(row.payload)
