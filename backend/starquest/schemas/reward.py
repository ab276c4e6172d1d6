from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class RewardCreate(BaseModel):
    name_en: str
    name_zh: Optional[str] = None
    stars_cost: int = Field(gt=0)


class RewardRead(BaseModel):
    id: str
    name_en: str
    name_zh: Optional[str] = None
    stars_cost: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
