import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from statebook.api.deps import get_db
from statebook.core.catalog import service
from statebook.core.catalog.schemas import StateUpdateRequest
from statebook.core.serialization.schemas import StateResponse

router = APIRouter(prefix="/states", tags=["States"])


@router.get("/{state_id}", response_model=StateResponse)
async def get_state(state_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    state = await service.get_state(db, state_id)
    return StateResponse.from_orm_instance(state)


@router.patch("/{state_id}", response_model=StateResponse)
async def update_state(
    state_id: uuid.UUID,
    body: StateUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    state = await service.update_state(db, state_id, body)
    return StateResponse.from_orm_instance(state)


@router.delete("/{state_id}", status_code=204)
async def delete_state(state_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await service.delete_state(db, state_id)
