"""Schemas for credit settings, interest tiers and credit-aware balances."""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ChildBalanceWithCredit(BaseModel):
    child_id: str
    family_id: str
    name: str
    current_stars: int
    lifetime_stars: int
    credit_enabled: bool
    credit_limit: int
    original_credit_limit: int
    credit_used: int  # debt currently owed
    available_credit: int
    spendable_stars: int  # balance plus available credit
    credit_usage_percent: float = 0.0


class CreditSettingsUpdate(BaseModel):
    credit_enabled: bool
    credit_limit: int = Field(ge=0)


class CreditSettingsRead(BaseModel):
    child_id: str
    credit_enabled: bool
    credit_limit: int
    original_credit_limit: int
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InterestTierCreate(BaseModel):
    min_debt: int = Field(ge=0)
    max_debt: Optional[int] = None
    interest_rate: float = Field(ge=0)


class InterestTierUpdate(BaseModel):
    min_debt: Optional[int] = Field(default=None, ge=0)
    max_debt: Optional[int] = None
    interest_rate: Optional[float] = Field(default=None, ge=0)


class InterestTierRead(BaseModel):
    id: str
    tier_order: int
    min_debt: int
    max_debt: Optional[int]
    interest_rate: float
    rate_display: str
    range_display: str
