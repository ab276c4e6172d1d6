"""Credit settings per child and the family's interest tier schedule."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.auth import get_current_user, require_role
from starquest.credit import (
    DEFAULT_INTEREST_TIERS,
    TierSpec,
    append_tier,
    format_debt_range,
    format_interest_rate,
    remove_tier,
    update_tier,
    validate_interest_tiers,
)
from starquest.crud import (
    get_credit_settings,
    get_interest_tier,
    get_interest_tiers,
    save_credit_settings,
    save_interest_tiers,
)
from starquest.database import get_session
from starquest.exceptions import InvalidTierScheduleError
from starquest.models import CreditInterestTier, User
from starquest.routes.common import ensure_family_child
from starquest.schemas import (
    CreditSettingsRead,
    CreditSettingsUpdate,
    InterestTierCreate,
    InterestTierRead,
    InterestTierUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/credit", tags=["credit"])


def _tier_read(tier: CreditInterestTier) -> InterestTierRead:
    return InterestTierRead(
        id=tier.id,
        tier_order=tier.tier_order,
        min_debt=tier.min_debt,
        max_debt=tier.max_debt,
        interest_rate=tier.interest_rate,
        rate_display=format_interest_rate(tier.interest_rate),
        range_display=format_debt_range(tier.min_debt, tier.max_debt),
    )


async def _save_schedule(
    db: AsyncSession, family_id: str, specs: list[TierSpec]
) -> list[InterestTierRead]:
    try:
        validate_interest_tiers(specs)
    except InvalidTierScheduleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "invalid_tier_schedule", "message": str(exc)},
        )
    tiers = await save_interest_tiers(db, family_id, specs)
    logger.info("Interest tiers updated for family %s", family_id)
    return [_tier_read(t) for t in tiers]


async def _family_tier(
    db: AsyncSession, tier_id: str, family_id: str
) -> CreditInterestTier:
    tier = await get_interest_tier(db, tier_id)
    if not tier or tier.family_id != family_id:
        raise HTTPException(status_code=404, detail="Tier not found")
    return tier


@router.get("/children/{child_id}", response_model=CreditSettingsRead)
async def read_credit_settings(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    await ensure_family_child(db, current_user, child_id)
    settings = await get_credit_settings(db, child_id)
    if not settings:
        return CreditSettingsRead(
            child_id=child_id,
            credit_enabled=False,
            credit_limit=0,
            original_credit_limit=0,
        )
    return settings


@router.put("/children/{child_id}", response_model=CreditSettingsRead)
async def update_credit_settings(
    child_id: str,
    data: CreditSettingsUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    child = await ensure_family_child(db, current_user, child_id)
    settings = await save_credit_settings(
        db, child, data.credit_enabled, data.credit_limit
    )
    logger.info(
        "Credit for child %s set to enabled=%s limit=%s",
        child_id,
        data.credit_enabled,
        data.credit_limit,
    )
    return settings


@router.get("/tiers", response_model=List[InterestTierRead])
async def list_tiers(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    tiers = await get_interest_tiers(db, current_user.family_id)
    return [_tier_read(t) for t in tiers]


@router.post("/tiers/defaults", response_model=List[InterestTierRead])
async def initialize_default_tiers(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    """Seed the default schedule for a family that has none yet."""
    if await get_interest_tiers(db, current_user.family_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "tiers_exist",
                "message": "Interest tiers are already configured",
            },
        )
    return await _save_schedule(
        db, current_user.family_id, list(DEFAULT_INTEREST_TIERS)
    )


@router.put("/tiers", response_model=List[InterestTierRead])
async def replace_tiers(
    data: List[InterestTierCreate],
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    """Replace the whole schedule; tiers are numbered in the order given."""
    specs = [
        TierSpec(position, t.min_debt, t.max_debt, t.interest_rate)
        for position, t in enumerate(data, start=1)
    ]
    return await _save_schedule(db, current_user.family_id, specs)


@router.post("/tiers", response_model=List[InterestTierRead])
async def add_tier(
    data: InterestTierCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    tiers = await get_interest_tiers(db, current_user.family_id)
    specs = append_tier(tiers, data.min_debt, data.max_debt, data.interest_rate)
    return await _save_schedule(db, current_user.family_id, specs)


@router.put("/tiers/{tier_id}", response_model=List[InterestTierRead])
async def edit_tier(
    tier_id: str,
    data: InterestTierUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    tier = await _family_tier(db, tier_id, current_user.family_id)
    tiers = await get_interest_tiers(db, current_user.family_id)
    changes = data.model_dump(exclude_unset=True)
    # Only max_debt may be cleared; a null elsewhere means "unchanged".
    for key in ("min_debt", "interest_rate"):
        if changes.get(key) is None:
            changes.pop(key, None)
    specs = update_tier(tiers, tier.tier_order, **changes)
    return await _save_schedule(db, current_user.family_id, specs)


@router.delete("/tiers/{tier_id}", response_model=List[InterestTierRead])
async def delete_tier(
    tier_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    tier = await _family_tier(db, tier_id, current_user.family_id)
    tiers = await get_interest_tiers(db, current_user.family_id)
    specs = remove_tier(tiers, tier.tier_order)
    return await _save_schedule(db, current_user.family_id, specs)
