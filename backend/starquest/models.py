"""Database models used by StarQuest.

The models are defined with SQLModel (built on SQLAlchemy and Pydantic)
and represent families, their members, quests, the star ledger, rewards,
levels and the credit configuration.  Primary keys are UUID strings so ids can be passed
around as plain text by the batch helpers.
"""

import uuid
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


class Family(SQLModel, table=True):
    """Household grouping parents and children."""

    __tablename__ = "families"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class User(SQLModel, table=True):
    """Family member; either a parent or a child."""

    __tablename__ = "users"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: Optional[str] = Field(default=None, foreign_key="families.id")
    name: str
    email: str = Field(unique=True, index=True)
    password_hash: str
    role: str  # 'parent' or 'child'
    locale: str = "en"  # 'en' or 'zh-CN'
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Quest(SQLModel, table=True):
    """Something a child can do (or fail to do) for a fixed number of stars."""

    __tablename__ = "quests"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    name_en: str
    name_zh: Optional[str] = None
    stars: int  # negative for duties and violations
    type: str = "bonus"  # duty, bonus, violation
    scope: str = "self"  # self, family, other
    category: Optional[str] = None
    icon: Optional[str] = None
    is_positive: bool = True
    is_active: bool = True
    max_per_day: int = 1
    sort_order: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


class StarTransaction(SQLModel, table=True):
    """Stars earned or lost by a child, pending until a parent reviews it."""

    __tablename__ = "star_transactions"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    child_id: str = Field(foreign_key="users.id", index=True)
    quest_id: Optional[str] = Field(default=None, foreign_key="quests.id")
    custom_description: Optional[str] = None
    stars: int
    source: str  # parent_record, child_request
    status: str = "pending"  # pending, approved, rejected
    child_note: Optional[str] = None
    parent_response: Optional[str] = None
    created_by: str = Field(foreign_key="users.id")
    reviewed_by: Optional[str] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    reviewed_at: Optional[str] = None  # ISO-8601


class Reward(SQLModel, table=True):
    """Something a child can spend stars on."""

    __tablename__ = "rewards"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    name_en: str
    name_zh: Optional[str] = None
    stars_cost: int
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Redemption(SQLModel, table=True):
    """A child's request to exchange stars for a reward."""

    __tablename__ = "redemptions"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    child_id: str = Field(foreign_key="users.id", index=True)
    reward_id: str = Field(foreign_key="rewards.id")
    stars_spent: int
    status: str = "pending"  # pending, approved, rejected, fulfilled
    child_note: Optional[str] = None
    parent_response: Optional[str] = None
    reviewed_by: Optional[str] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    reviewed_at: Optional[str] = None  # ISO-8601


class Level(SQLModel, table=True):
    """A named rank reached once a child's lifetime stars pass a threshold."""

    __tablename__ = "levels"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    level_number: int
    name_en: str
    name_zh: Optional[str] = None
    stars_required: int
    icon: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ChildCreditSettings(SQLModel, table=True):
    """Per-child borrowing configuration."""

    __tablename__ = "child_credit_settings"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id")
    child_id: str = Field(foreign_key="users.id", unique=True)
    credit_enabled: bool = False
    credit_limit: int = 0
    original_credit_limit: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CreditInterestTier(SQLModel, table=True):
    """One band of the family's debt interest schedule."""

    __tablename__ = "credit_interest_tiers"

    id: str = Field(default_factory=_new_id, primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    tier_order: int
    min_debt: int
    max_debt: Optional[int] = None  # None means unbounded
    interest_rate: float  # decimal, e.g. 0.05 = 5%
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ChildBalance(SQLModel, table=True):
    """Cached ledger totals for a child, re-derived on every refresh."""

    __tablename__ = "child_balances"

    child_id: str = Field(foreign_key="users.id", primary_key=True)
    family_id: str = Field(foreign_key="families.id", index=True)
    current_stars: int = 0
    lifetime_stars: int = 0
    updated_at: datetime = Field(default_factory=datetime.utcnow)
