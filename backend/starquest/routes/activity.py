"""Endpoints for the star ledger: requests, records and parent review."""

import logging
from datetime import datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.actions import ActivityActions
from starquest.auth import require_role
from starquest.batch import BalanceRefresher, SQLModelStore
from starquest.crud import (
    count_pending_quest_requests,
    create_star_transaction,
    get_quest,
    get_star_transaction,
    get_star_transactions_by_child,
    get_star_transactions_by_family,
    refresh_child_balance,
)
from starquest.database import get_session
from starquest.date_utils import utc_now_iso
from starquest.models import Quest, StarTransaction, User
from starquest.quests import child_visible_quests
from starquest.routes.common import ensure_family_child, ensure_family_rows
from starquest.schemas import (
    BatchApprove,
    BatchReject,
    BatchResponse,
    StarRecordCreate,
    StarRequestCreate,
    StarTransactionRead,
)
from starquest.selection import BatchSelection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activity", tags=["activity"])


def _actions(db: AsyncSession, user: User, ids: list[str]) -> ActivityActions:
    return ActivityActions(
        BatchSelection.from_ids(ids),
        SQLModelStore(db),
        BalanceRefresher(db, user.family_id),
    )


async def _family_quest(db: AsyncSession, quest_id: str, family_id: str) -> Quest:
    quest = await get_quest(db, quest_id)
    if not quest or quest.family_id != family_id:
        raise HTTPException(status_code=404, detail="Quest not found")
    return quest


@router.post("/request", response_model=StarTransactionRead)
async def request_stars(
    data: StarRequestCreate,
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    """Child asks for stars; the entry waits for a parent's review.

    A quest request is worth the quest's stars times ``multiplier``.  Only
    one pending request per quest and day is accepted.
    """
    stars = data.stars
    description = data.custom_description
    if data.quest_id:
        quest = await _family_quest(db, data.quest_id, child.family_id)
        if not child_visible_quests([quest]):
            raise HTTPException(status_code=404, detail="Quest not found")
        start_of_day = datetime.combine(datetime.utcnow().date(), time.min)
        if await count_pending_quest_requests(db, child.id, quest.id, start_of_day):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "code": "activity.duplicatePending",
                    "message": "A request for this quest is already waiting for review",
                },
            )
        stars = quest.stars * data.multiplier
        description = None

    tx = StarTransaction(
        family_id=child.family_id,
        child_id=child.id,
        quest_id=data.quest_id,
        custom_description=description,
        stars=stars,
        source="child_request",
        status="pending",
        child_note=data.child_note,
        created_by=child.id,
    )
    tx = await create_star_transaction(db, tx)
    logger.info("Child %s requested %s stars", child.id, stars)
    return tx


@router.post("/record", response_model=StarTransactionRead)
async def record_stars(
    data: StarRecordCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    """Parent records stars directly; these are approved immediately."""
    child = await ensure_family_child(db, current_user, data.child_id)
    stars = data.stars
    description = data.custom_description
    if data.quest_id:
        quest = await _family_quest(db, data.quest_id, current_user.family_id)
        stars = quest.stars * data.multiplier
        description = None

    tx = StarTransaction(
        family_id=child.family_id,
        child_id=child.id,
        quest_id=data.quest_id,
        custom_description=description,
        stars=stars,
        source="parent_record",
        status="approved",
        parent_response=data.note.strip() if data.note and data.note.strip() else None,
        created_by=current_user.id,
        reviewed_by=current_user.id,
        reviewed_at=utc_now_iso(),
    )
    tx = await create_star_transaction(db, tx)
    await refresh_child_balance(db, child)
    logger.info("Parent %s recorded %s stars for %s", current_user.id, stars, child.id)
    return tx


@router.get("/", response_model=List[StarTransactionRead])
async def list_activity(
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    return await get_star_transactions_by_family(db, current_user.family_id, status)


@router.get("/mine", response_model=List[StarTransactionRead])
async def list_my_activity(
    db: AsyncSession = Depends(get_session),
    child: User = Depends(require_role("child")),
):
    return await get_star_transactions_by_child(db, child.id)


@router.post("/batch-approve", response_model=BatchResponse)
async def batch_approve(
    data: BatchApprove,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    ids = await ensure_family_rows(
        db, StarTransaction, current_user.family_id, data.ids, status="pending"
    )
    processed = await _actions(db, current_user, ids).batch_approve(current_user.id)
    return BatchResponse(processed=processed)


@router.post("/batch-reject", response_model=BatchResponse)
async def batch_reject(
    data: BatchReject,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    """Reject the selected entries; a blank reason leaves them untouched."""
    ids = await ensure_family_rows(
        db, StarTransaction, current_user.family_id, data.ids, status="pending"
    )
    actions = _actions(db, current_user, ids)
    actions.batch.batch_reject_reason = data.reason
    processed = await actions.batch_reject(current_user.id)
    return BatchResponse(processed=processed)


@router.delete("/{tx_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_activity(
    tx_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    tx = await get_star_transaction(db, tx_id)
    if not tx or tx.family_id != current_user.family_id:
        raise HTTPException(status_code=404, detail="Transaction not found")
    await _actions(db, current_user, []).delete(tx)
    logger.info("Star transaction %s deleted by %s", tx_id, current_user.id)
    return None
