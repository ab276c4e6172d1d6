"""Schemas for quests."""

from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field

QuestType = Literal["duty", "bonus", "violation"]
QuestScope = Literal["self", "family", "other"]
QuestCategory = Literal[
    "health",
    "study",
    "chores",
    "hygiene",
    "learning",
    "social",
    "creativity",
    "exercise",
    "reading",
    "music",
    "art",
    "kindness",
    "responsibility",
    "other",
]


class QuestCreate(BaseModel):
    name_en: str = Field(min_length=1)
    name_zh: Optional[str] = None
    stars: int
    type: QuestType = "bonus"
    scope: QuestScope = "self"
    category: Optional[QuestCategory] = None
    icon: Optional[str] = None
    is_active: bool = True
    max_per_day: int = Field(default=1, ge=1)
    sort_order: int = 0


class QuestUpdate(BaseModel):
    name_en: Optional[str] = Field(default=None, min_length=1)
    name_zh: Optional[str] = None
    stars: Optional[int] = None
    type: Optional[QuestType] = None
    scope: Optional[QuestScope] = None
    category: Optional[QuestCategory] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None
    max_per_day: Optional[int] = Field(default=None, ge=1)
    sort_order: Optional[int] = None


class QuestRead(BaseModel):
    id: str
    name_en: str
    name_zh: Optional[str] = None
    stars: int
    type: str
    scope: str
    category: Optional[str] = None
    icon: Optional[str] = None
    is_positive: bool
    is_active: bool
    max_per_day: int
    sort_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class QuestGroupRead(BaseModel):
    key: str
    title_en: str
    title_zh: str
    quests: list[QuestRead]


class SuggestedStars(BaseModel):
    min: int
    max: int
    default: int
