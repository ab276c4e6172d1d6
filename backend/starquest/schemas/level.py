"""Schemas for levels and a child's progress through them."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class LevelCreate(BaseModel):
    level_number: int = Field(ge=1)
    name_en: str = Field(min_length=1)
    name_zh: Optional[str] = None
    stars_required: int = Field(ge=0)
    icon: Optional[str] = None


class LevelUpdate(BaseModel):
    level_number: Optional[int] = Field(default=None, ge=1)
    name_en: Optional[str] = Field(default=None, min_length=1)
    name_zh: Optional[str] = None
    stars_required: Optional[int] = Field(default=None, ge=0)
    icon: Optional[str] = None


class LevelRead(BaseModel):
    id: str
    level_number: int
    name_en: str
    name_zh: Optional[str] = None
    stars_required: int
    icon: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LevelProgressRead(BaseModel):
    child_id: str
    lifetime_stars: int
    current: Optional[LevelRead] = None
    next: Optional[LevelRead] = None
    stars_to_next: int = 0
    progress_percent: float = 0.0
