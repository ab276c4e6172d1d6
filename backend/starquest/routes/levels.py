"""Family level ladder maintained by parents."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.auth import get_current_user, require_role
from starquest.crud import (
    create_level,
    delete_level,
    get_level,
    get_level_by_number,
    get_levels_by_family,
    save_level,
)
from starquest.database import get_session
from starquest.models import Level, User
from starquest.schemas import LevelCreate, LevelRead, LevelUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/levels", tags=["levels"])


def _number_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "code": "level_number_taken",
            "message": "A level with this number already exists",
        },
    )


async def _family_level(db: AsyncSession, level_id: str, family_id: str) -> Level:
    level = await get_level(db, level_id)
    if not level or level.family_id != family_id:
        raise HTTPException(status_code=404, detail="Level not found")
    return level


@router.get("/", response_model=List[LevelRead])
async def list_levels(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_levels_by_family(db, current_user.family_id)


@router.post("/", response_model=LevelRead)
async def add_level(
    data: LevelCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    if await get_level_by_number(db, current_user.family_id, data.level_number):
        raise _number_taken()
    level = Level(family_id=current_user.family_id, **data.model_dump())
    level = await create_level(db, level)
    logger.info("Level %s created for family %s", level.level_number, current_user.family_id)
    return level


@router.put("/{level_id}", response_model=LevelRead)
async def update_level(
    level_id: str,
    data: LevelUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    level = await _family_level(db, level_id, current_user.family_id)
    changes = data.model_dump(exclude_unset=True)
    number = changes.get("level_number")
    if number is not None and number != level.level_number:
        if await get_level_by_number(db, current_user.family_id, number):
            raise _number_taken()
    for field, value in changes.items():
        if value is None and field in ("level_number", "name_en", "stars_required"):
            continue
        setattr(level, field, value)
    updated = await save_level(db, level)
    logger.info("Level %s updated by %s", level_id, current_user.id)
    return updated


@router.delete("/{level_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_level_route(
    level_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    level = await _family_level(db, level_id, current_user.family_id)
    await delete_level(db, level)
    logger.info("Level %s deleted by %s", level_id, current_user.id)
    return None
