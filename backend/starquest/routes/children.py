"""Routes for managing children and reading their balances."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.auth import require_role
from starquest.crud import (
    create_child,
    get_balance_with_credit,
    get_child_balance,
    get_children_by_family,
    get_levels_by_family,
    get_user_by_email,
    refresh_child_balance,
)
from starquest.database import get_session
from starquest.levels import level_progress
from starquest.models import User
from starquest.routes.common import ensure_family_child
from starquest.schemas import (
    ChildCreate,
    ChildBalanceWithCredit,
    LevelProgressRead,
    LevelRead,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/children", tags=["children"])


async def _level_progress(db: AsyncSession, child: User) -> LevelProgressRead:
    balance = await get_child_balance(db, child.id)
    if not balance:
        balance = await refresh_child_balance(db, child)
    levels = await get_levels_by_family(db, child.family_id)
    progress = level_progress(levels, balance.lifetime_stars)
    if progress is None:
        return LevelProgressRead(child_id=child.id, lifetime_stars=balance.lifetime_stars)
    return LevelProgressRead(
        child_id=child.id,
        lifetime_stars=balance.lifetime_stars,
        current=LevelRead.model_validate(progress.current),
        next=LevelRead.model_validate(progress.next) if progress.next else None,
        stars_to_next=progress.stars_to_next,
        progress_percent=progress.progress_percent,
    )


@router.post("/", response_model=UserResponse)
async def add_child(
    data: ChildCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    if await get_user_by_email(db, data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "auth_email_registered",
                "message": "Email is already registered.",
            },
        )
    child = User(
        name=data.name,
        email=data.email,
        password_hash=data.password,
        role="child",
        locale=data.locale,
    )
    child = await create_child(db, child, current_user.family_id)
    logger.info("Child %s added to family %s", child.id, current_user.family_id)
    return child


@router.get("/", response_model=List[ChildBalanceWithCredit])
async def list_children(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    """Return every child in the family with their credit-aware balance."""
    children = await get_children_by_family(db, current_user.family_id)
    return [await get_balance_with_credit(db, child) for child in children]


@router.get("/me/balance", response_model=ChildBalanceWithCredit)
async def my_balance(
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    return await get_balance_with_credit(db, child)


@router.get("/{child_id}/balance", response_model=ChildBalanceWithCredit)
async def child_balance(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    child = await ensure_family_child(db, current_user, child_id)
    return await get_balance_with_credit(db, child)


@router.get("/me/level", response_model=LevelProgressRead)
async def my_level(
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    return await _level_progress(db, child)


@router.get("/{child_id}/level", response_model=LevelProgressRead)
async def child_level(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    child = await ensure_family_child(db, current_user, child_id)
    return await _level_progress(db, child)
