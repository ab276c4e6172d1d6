"""Schemas for star transactions and their review."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator


class StarRequestCreate(BaseModel):
    """A child's request; either for a quest or a described custom amount."""

    quest_id: Optional[str] = None
    multiplier: int = Field(default=1, ge=1)
    stars: Optional[int] = Field(default=None, gt=0)
    custom_description: Optional[str] = None
    child_note: Optional[str] = None

    @model_validator(mode="after")
    def check_quest_or_custom(self):
        if self.quest_id is None and (self.stars is None or not self.custom_description):
            raise ValueError("Either quest_id or stars with custom_description is required")
        return self


class StarRecordCreate(BaseModel):
    child_id: str
    quest_id: Optional[str] = None
    multiplier: int = Field(default=1, ge=1)
    stars: Optional[int] = None
    custom_description: Optional[str] = None
    note: Optional[str] = None

    @model_validator(mode="after")
    def check_quest_or_custom(self):
        if self.quest_id is None and (self.stars is None or not self.custom_description):
            raise ValueError("Either quest_id or stars with custom_description is required")
        return self


class StarTransactionRead(BaseModel):
    id: str
    child_id: str
    quest_id: Optional[str] = None
    custom_description: Optional[str] = None
    stars: int
    source: str
    status: str
    child_note: Optional[str] = None
    parent_response: Optional[str] = None
    created_by: str
    reviewed_by: Optional[str] = None
    created_at: datetime
    reviewed_at: Optional[str] = None

    model_config = {"from_attributes": True}


class BatchApprove(BaseModel):
    ids: list[str]


class BatchReject(BaseModel):
    ids: list[str]
    reason: str = ""


class BatchResponse(BaseModel):
    processed: int
