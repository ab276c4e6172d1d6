"""Quest catalogue: parents maintain it, children see the bonus quests."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.auth import get_current_user, require_role
from starquest.crud import (
    create_quest,
    delete_quest,
    get_quest,
    get_quests_by_family,
    save_quest,
)
from starquest.database import get_session
from starquest.models import Quest, User
from starquest.quests import child_visible_quests, group_quests, suggested_stars
from starquest.schemas import (
    QuestCreate,
    QuestGroupRead,
    QuestRead,
    QuestUpdate,
    SuggestedStars,
)
from starquest.schemas.quest import QuestCategory, QuestScope, QuestType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quests", tags=["quests"])

# Columns that cannot be cleared; a null in an update leaves them unchanged.
_NOT_NULL_FIELDS = {
    "name_en",
    "stars",
    "type",
    "scope",
    "is_active",
    "max_per_day",
    "sort_order",
}


async def _family_quest(db: AsyncSession, quest_id: str, family_id: str) -> Quest:
    quest = await get_quest(db, quest_id)
    if not quest or quest.family_id != family_id:
        raise HTTPException(status_code=404, detail="Quest not found")
    return quest


@router.get("/", response_model=List[QuestRead])
async def list_quests(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Parents get every quest; children only active bonus quests."""
    quests = await get_quests_by_family(db, current_user.family_id)
    if current_user.role == "child":
        return child_visible_quests(quests)
    return quests


@router.get("/groups", response_model=List[QuestGroupRead])
async def list_quest_groups(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    quests = await get_quests_by_family(db, current_user.family_id)
    return [
        QuestGroupRead(
            key=group.key,
            title_en=group.title_en,
            title_zh=group.title_zh,
            quests=[QuestRead.model_validate(q) for q in group.quests],
        )
        for group in group_quests(quests)
    ]


@router.get("/suggested-stars", response_model=SuggestedStars)
async def read_suggested_stars(
    type: QuestType,
    scope: Optional[QuestScope] = None,
    category: Optional[QuestCategory] = None,
    current_user: User = Depends(require_role("parent")),
):
    return SuggestedStars(**suggested_stars(type, scope, category)._asdict())


@router.post("/", response_model=QuestRead)
async def add_quest(
    data: QuestCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    quest = Quest(family_id=current_user.family_id, **data.model_dump())
    quest = await create_quest(db, quest)
    logger.info("Quest %s created by %s", quest.id, current_user.id)
    return quest


@router.put("/{quest_id}", response_model=QuestRead)
async def update_quest(
    quest_id: str,
    data: QuestUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    quest = await _family_quest(db, quest_id, current_user.family_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in _NOT_NULL_FIELDS:
            continue
        setattr(quest, field, value)
    updated = await save_quest(db, quest)
    logger.info("Quest %s updated by %s", quest_id, current_user.id)
    return updated


@router.delete("/{quest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quest_route(
    quest_id: str,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    quest = await _family_quest(db, quest_id, current_user.family_id)
    await delete_quest(db, quest)
    logger.info("Quest %s deleted by %s", quest_id, current_user.id)
    return None
