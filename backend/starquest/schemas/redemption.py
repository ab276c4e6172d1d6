"""Schemas for reward redemptions and their review."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class RedemptionCreate(BaseModel):
    reward_id: str
    child_note: Optional[str] = None


class RedemptionRead(BaseModel):
    id: str
    child_id: str
    reward_id: str
    stars_spent: int
    status: str
    child_note: Optional[str] = None
    parent_response: Optional[str] = None
    reviewed_by: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[str] = None

    model_config = {"from_attributes": True}


class RedemptionApprove(BaseModel):
    approval_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)


class RedemptionReject(BaseModel):
    reason: str = ""


class RedemptionBatchApprove(BaseModel):
    ids: list[str]
    approval_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)


class RedemptionBatchReject(BaseModel):
    ids: list[str]
    reason: str = ""
