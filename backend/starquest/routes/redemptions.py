"""Reward redemption requests and their review by parents."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.actions import RedemptionActions
from starquest.auth import require_role
from starquest.batch import BalanceRefresher, SQLModelStore
from starquest.crud import (
    create_redemption,
    get_balance_with_credit,
    get_redemption,
    get_redemptions_by_child,
    get_redemptions_by_family,
    get_reward,
)
from starquest.database import get_session
from starquest.models import Redemption, User
from starquest.routes.common import ensure_family_rows
from starquest.schemas import (
    BatchResponse,
    RedemptionApprove,
    RedemptionBatchApprove,
    RedemptionBatchReject,
    RedemptionCreate,
    RedemptionRead,
    RedemptionReject,
)
from starquest.selection import BatchSelection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/redemptions", tags=["redemptions"])


def _actions(db: AsyncSession, user: User, ids: list[str]) -> RedemptionActions:
    return RedemptionActions(
        BatchSelection.from_ids(ids),
        SQLModelStore(db),
        BalanceRefresher(db, user.family_id),
    )


async def _pending_redemption(
    db: AsyncSession, redemption_id: str, family_id: str
) -> Redemption:
    redemption = await get_redemption(db, redemption_id)
    if (
        not redemption
        or redemption.family_id != family_id
        or redemption.status != "pending"
    ):
        raise HTTPException(status_code=404, detail="Redemption not found")
    return redemption


@router.post("/", response_model=RedemptionRead)
async def request_redemption(
    data: RedemptionCreate,
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    """Child spends stars (and available credit) on a reward."""
    reward = await get_reward(db, data.reward_id)
    if not reward or reward.family_id != child.family_id or not reward.is_active:
        raise HTTPException(status_code=404, detail="Reward not found")
    balance = await get_balance_with_credit(db, child)
    if reward.stars_cost > balance.spendable_stars:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "insufficient_stars",
                "message": "Not enough stars to redeem this reward",
            },
        )
    redemption = Redemption(
        family_id=child.family_id,
        child_id=child.id,
        reward_id=reward.id,
        stars_spent=reward.stars_cost,
        child_note=data.child_note,
    )
    redemption = await create_redemption(db, redemption)
    logger.info("Child %s requested reward %s", child.id, reward.id)
    return redemption


@router.get("/", response_model=List[RedemptionRead])
async def list_redemptions(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    return await get_redemptions_by_family(db, current_user.family_id, status)


@router.get("/mine", response_model=List[RedemptionRead])
async def list_my_redemptions(
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    return await get_redemptions_by_child(db, child.id)


@router.post("/batch-approve", response_model=BatchResponse)
async def batch_approve(
    data: RedemptionBatchApprove,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    ids = await ensure_family_rows(
        db, Redemption, current_user.family_id, data.ids, status="pending"
    )
    processed = await _actions(db, current_user, ids).batch_approve(
        data.approval_date, current_user.id
    )
    return BatchResponse(processed=processed)


@router.post("/batch-reject", response_model=BatchResponse)
async def batch_reject(
    data: RedemptionBatchReject,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    ids = await ensure_family_rows(
        db, Redemption, current_user.family_id, data.ids, status="pending"
    )
    actions = _actions(db, current_user, ids)
    actions.batch.batch_reject_reason = data.reason
    processed = await actions.batch_reject(current_user.id)
    return BatchResponse(processed=processed)


@router.post("/{redemption_id}/approve", response_model=RedemptionRead)
async def approve_redemption(
    redemption_id: str,
    data: RedemptionApprove | None = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    redemption = await _pending_redemption(db, redemption_id, current_user.family_id)
    approval_date = data.approval_date if data else None
    await _actions(db, current_user, []).approve(
        redemption_id, approval_date, current_user.id
    )
    await db.refresh(redemption)
    logger.info("Redemption %s approved by %s", redemption_id, current_user.id)
    return redemption


@router.post("/{redemption_id}/reject", response_model=RedemptionRead)
async def reject_redemption(
    redemption_id: str,
    data: RedemptionReject,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    redemption = await _pending_redemption(db, redemption_id, current_user.family_id)
    await _actions(db, current_user, []).reject(
        redemption_id, data.reason, current_user.id
    )
    await db.refresh(redemption)
    logger.info("Redemption %s rejected by %s", redemption_id, current_user.id)
    return redemption
