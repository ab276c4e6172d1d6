from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.auth import get_current_user, require_role
from starquest.crud import create_reward, get_rewards_by_family
from starquest.database import get_session
from starquest.models import Reward, User
from starquest.schemas import RewardCreate, RewardRead

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.post("/", response_model=RewardRead)
async def add_reward(
    data: RewardCreate,
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_role("parent")),
):
    reward = Reward(family_id=current_user.family_id, **data.model_dump())
    return await create_reward(db, reward)


@router.get("/", response_model=List[RewardRead])
async def list_rewards(
    db: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_rewards_by_family(db, current_user.family_id)
