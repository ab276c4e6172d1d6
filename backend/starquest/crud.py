"""Asynchronous CRUD helpers for the application's data models.

Each function in this module encapsulates a specific database operation
using SQLModel and SQLAlchemy.  Centralizing the logic keeps route
handlers light and makes behavior easier to test.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, case, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from starquest.auth import get_password_hash
from starquest.credit import build_child_balance
from starquest.models import (
    Family,
    User,
    Quest,
    StarTransaction,
    Reward,
    Redemption,
    Level,
    ChildCreditSettings,
    CreditInterestTier,
    ChildBalance,
)
from starquest.schemas.credit import ChildBalanceWithCredit


async def create_family_with_parent(
    db: AsyncSession, family_name: str, parent: User
) -> User:
    """Create a family and its first parent in a single transaction."""

    family = Family(name=family_name)
    db.add(family)
    await db.flush()  # ensure family.id is populated
    parent.family_id = family.id
    parent.role = "parent"
    if not parent.password_hash.startswith("$2b$"):
        parent.password_hash = get_password_hash(parent.password_hash)
    db.add(parent)
    await db.commit()
    await db.refresh(parent)
    return parent


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Return a user by email or ``None`` if not found."""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_child(db: AsyncSession, child: User, family_id: str) -> User:
    """Create a child in a family along with an empty balance row."""

    child.family_id = family_id
    child.role = "child"
    if not child.password_hash.startswith("$2b$"):
        child.password_hash = get_password_hash(child.password_hash)
    db.add(child)
    await db.flush()
    db.add(ChildBalance(child_id=child.id, family_id=family_id))
    await db.commit()
    await db.refresh(child)
    return child


async def get_children_by_family(db: AsyncSession, family_id: str) -> list[User]:
    """Return all children in a family ordered by name."""
    result = await db.execute(
        select(User)
        .where(User.family_id == family_id, User.role == "child")
        .order_by(User.name)
    )
    return result.scalars().all()


async def get_family_child(
    db: AsyncSession, family_id: str, child_id: str
) -> User | None:
    """Return the child only if it belongs to ``family_id``."""
    child = await get_user(db, child_id)
    if not child or child.role != "child" or child.family_id != family_id:
        return None
    return child


# --- Balances ---------------------------------------------------------------


async def calculate_child_totals(db: AsyncSession, child_id: str) -> tuple[int, int]:
    """Return ``(current_stars, lifetime_stars)`` from the ledger."""

    earned = await db.execute(
        select(
            func.coalesce(func.sum(StarTransaction.stars), 0),
            func.coalesce(
                func.sum(
                    case((StarTransaction.stars > 0, StarTransaction.stars), else_=0)
                ),
                0,
            ),
        ).where(
            StarTransaction.child_id == child_id,
            StarTransaction.status == "approved",
        )
    )
    net, lifetime = earned.one()
    spent = await db.execute(
        select(func.coalesce(func.sum(Redemption.stars_spent), 0)).where(
            Redemption.child_id == child_id,
            Redemption.status.in_(["approved", "fulfilled"]),
        )
    )
    return int(net) - int(spent.scalar_one()), int(lifetime)


async def get_child_balance(db: AsyncSession, child_id: str) -> ChildBalance | None:
    result = await db.execute(
        select(ChildBalance).where(ChildBalance.child_id == child_id)
    )
    return result.scalar_one_or_none()


async def refresh_child_balance(db: AsyncSession, child: User) -> ChildBalance:
    """Recompute and store a child's cached balance."""

    current, lifetime = await calculate_child_totals(db, child.id)
    balance = await get_child_balance(db, child.id)
    if not balance:
        balance = ChildBalance(child_id=child.id, family_id=child.family_id)
    balance.current_stars = current
    balance.lifetime_stars = lifetime
    balance.updated_at = datetime.utcnow()
    db.add(balance)
    await db.commit()
    await db.refresh(balance)
    return balance


async def refresh_family_balances(db: AsyncSession, family_id: str) -> None:
    for child in await get_children_by_family(db, family_id):
        await refresh_child_balance(db, child)


# --- Quests ----------------------------------------------------------------


async def create_quest(db: AsyncSession, quest: Quest) -> Quest:
    return await save_quest(db, quest)


async def get_quest(db: AsyncSession, quest_id: str) -> Quest | None:
    result = await db.execute(select(Quest).where(Quest.id == quest_id))
    return result.scalar_one_or_none()


async def get_quests_by_family(db: AsyncSession, family_id: str) -> list[Quest]:
    result = await db.execute(
        select(Quest)
        .where(Quest.family_id == family_id)
        .order_by(Quest.sort_order, Quest.created_at)
    )
    return result.scalars().all()


async def save_quest(db: AsyncSession, quest: Quest) -> Quest:
    quest.is_positive = quest.stars > 0
    db.add(quest)
    await db.commit()
    await db.refresh(quest)
    return quest


async def delete_quest(db: AsyncSession, quest: Quest) -> None:
    """Delete a quest; ledger entries recorded against it keep their stars."""
    await db.execute(
        update(StarTransaction)
        .where(StarTransaction.quest_id == quest.id)
        .values(quest_id=None)
    )
    await db.delete(quest)
    await db.commit()


async def count_pending_quest_requests(
    db: AsyncSession, child_id: str, quest_id: str, since: datetime
) -> int:
    """Count the child's pending requests for ``quest_id`` created since ``since``."""
    result = await db.execute(
        select(func.count())
        .select_from(StarTransaction)
        .where(
            StarTransaction.child_id == child_id,
            StarTransaction.quest_id == quest_id,
            StarTransaction.status == "pending",
            StarTransaction.created_at >= since,
        )
    )
    return result.scalar_one()


# --- Star transactions ------------------------------------------------------


async def create_star_transaction(
    db: AsyncSession, tx: StarTransaction
) -> StarTransaction:
    db.add(tx)
    await db.commit()
    await db.refresh(tx)
    return tx


async def get_star_transaction(
    db: AsyncSession, tx_id: str
) -> StarTransaction | None:
    result = await db.execute(select(StarTransaction).where(StarTransaction.id == tx_id))
    return result.scalar_one_or_none()


async def get_star_transactions_by_family(
    db: AsyncSession, family_id: str, status: Optional[str] = None
) -> list[StarTransaction]:
    """Return a family's star transactions, newest first."""
    query = select(StarTransaction).where(StarTransaction.family_id == family_id)
    if status:
        query = query.where(StarTransaction.status == status)
    result = await db.execute(query.order_by(StarTransaction.created_at.desc()))
    return result.scalars().all()


async def get_star_transactions_by_child(
    db: AsyncSession, child_id: str
) -> list[StarTransaction]:
    result = await db.execute(
        select(StarTransaction)
        .where(StarTransaction.child_id == child_id)
        .order_by(StarTransaction.created_at.desc())
    )
    return result.scalars().all()


async def count_family_rows(
    db: AsyncSession,
    model,
    family_id: str,
    ids: list[str],
    status: Optional[str] = None,
) -> int:
    """Count how many of ``ids`` are rows of ``model`` owned by the family.

    With ``status`` only rows currently in that status are counted.
    """
    query = (
        select(func.count())
        .select_from(model)
        .where(model.id.in_(ids), model.family_id == family_id)
    )
    if status:
        query = query.where(model.status == status)
    result = await db.execute(query)
    return result.scalar_one()


# --- Rewards and redemptions ------------------------------------------------


async def create_reward(db: AsyncSession, reward: Reward) -> Reward:
    db.add(reward)
    await db.commit()
    await db.refresh(reward)
    return reward


async def get_reward(db: AsyncSession, reward_id: str) -> Reward | None:
    result = await db.execute(select(Reward).where(Reward.id == reward_id))
    return result.scalar_one_or_none()


async def get_rewards_by_family(db: AsyncSession, family_id: str) -> list[Reward]:
    result = await db.execute(
        select(Reward)
        .where(Reward.family_id == family_id, Reward.is_active == True)  # noqa: E712
        .order_by(Reward.stars_cost)
    )
    return result.scalars().all()


async def create_redemption(db: AsyncSession, redemption: Redemption) -> Redemption:
    db.add(redemption)
    await db.commit()
    await db.refresh(redemption)
    return redemption


async def get_redemption(db: AsyncSession, redemption_id: str) -> Redemption | None:
    result = await db.execute(select(Redemption).where(Redemption.id == redemption_id))
    return result.scalar_one_or_none()


async def get_redemptions_by_family(
    db: AsyncSession, family_id: str, status: Optional[str] = None
) -> list[Redemption]:
    query = select(Redemption).where(Redemption.family_id == family_id)
    if status:
        query = query.where(Redemption.status == status)
    result = await db.execute(query.order_by(Redemption.created_at.desc()))
    return result.scalars().all()


async def get_redemptions_by_child(
    db: AsyncSession, child_id: str
) -> list[Redemption]:
    result = await db.execute(
        select(Redemption)
        .where(Redemption.child_id == child_id)
        .order_by(Redemption.created_at.desc())
    )
    return result.scalars().all()


# --- Levels ----------------------------------------------------------------


async def create_level(db: AsyncSession, level: Level) -> Level:
    db.add(level)
    await db.commit()
    await db.refresh(level)
    return level


async def get_level(db: AsyncSession, level_id: str) -> Level | None:
    result = await db.execute(select(Level).where(Level.id == level_id))
    return result.scalar_one_or_none()


async def get_levels_by_family(db: AsyncSession, family_id: str) -> list[Level]:
    """Return a family's levels from the lowest threshold up."""
    result = await db.execute(
        select(Level)
        .where(Level.family_id == family_id)
        .order_by(Level.stars_required, Level.level_number)
    )
    return result.scalars().all()


async def get_level_by_number(
    db: AsyncSession, family_id: str, level_number: int
) -> Level | None:
    result = await db.execute(
        select(Level).where(
            Level.family_id == family_id, Level.level_number == level_number
        )
    )
    return result.scalar_one_or_none()


async def save_level(db: AsyncSession, level: Level) -> Level:
    db.add(level)
    await db.commit()
    await db.refresh(level)
    return level


async def delete_level(db: AsyncSession, level: Level) -> None:
    await db.delete(level)
    await db.commit()


# --- Credit -----------------------------------------------------------------


async def get_credit_settings(
    db: AsyncSession, child_id: str
) -> ChildCreditSettings | None:
    result = await db.execute(
        select(ChildCreditSettings).where(ChildCreditSettings.child_id == child_id)
    )
    return result.scalar_one_or_none()


async def save_credit_settings(
    db: AsyncSession,
    child: User,
    credit_enabled: bool,
    credit_limit: int,
) -> ChildCreditSettings:
    """Create or update a child's credit settings.

    ``original_credit_limit`` follows the limit while credit is enabled and
    drops to zero when it is switched off.
    """
    settings = await get_credit_settings(db, child.id)
    if not settings:
        settings = ChildCreditSettings(child_id=child.id, family_id=child.family_id)
    settings.credit_enabled = credit_enabled
    settings.credit_limit = credit_limit
    settings.original_credit_limit = credit_limit if credit_enabled else 0
    settings.updated_at = datetime.utcnow()
    db.add(settings)
    await db.commit()
    await db.refresh(settings)
    return settings


async def get_interest_tiers(
    db: AsyncSession, family_id: str
) -> list[CreditInterestTier]:
    """Return a family's interest tiers in ascending order."""
    result = await db.execute(
        select(CreditInterestTier)
        .where(CreditInterestTier.family_id == family_id)
        .order_by(CreditInterestTier.tier_order)
    )
    return result.scalars().all()


async def get_interest_tier(
    db: AsyncSession, tier_id: str
) -> CreditInterestTier | None:
    result = await db.execute(
        select(CreditInterestTier).where(CreditInterestTier.id == tier_id)
    )
    return result.scalar_one_or_none()


async def save_interest_tiers(
    db: AsyncSession, family_id: str, specs: list
) -> list[CreditInterestTier]:
    """Make the stored schedule match ``specs`` in one commit.

    Rows are matched by position so existing tiers keep their ids; surplus
    rows are deleted and missing ones inserted.
    """
    existing = await get_interest_tiers(db, family_id)
    for position, spec in enumerate(specs):
        if position < len(existing):
            tier = existing[position]
        else:
            tier = CreditInterestTier(
                family_id=family_id,
                tier_order=spec.tier_order,
                min_debt=spec.min_debt,
                interest_rate=spec.interest_rate,
            )
        tier.tier_order = spec.tier_order
        tier.min_debt = spec.min_debt
        tier.max_debt = spec.max_debt
        tier.interest_rate = spec.interest_rate
        db.add(tier)
    for surplus in existing[len(specs):]:
        await db.delete(surplus)
    await db.commit()
    return await get_interest_tiers(db, family_id)


async def get_balance_with_credit(
    db: AsyncSession, child: User
) -> ChildBalanceWithCredit:
    """Read a child's cached ledger and credit settings as one display row."""

    balance = await get_child_balance(db, child.id)
    if not balance:
        balance = await refresh_child_balance(db, child)
    settings = await get_credit_settings(db, child.id)
    return build_child_balance(
        child_id=child.id,
        family_id=child.family_id,
        name=child.name,
        current_stars=balance.current_stars,
        lifetime_stars=balance.lifetime_stars,
        credit_enabled=settings.credit_enabled if settings else False,
        credit_limit=settings.credit_limit if settings else 0,
        original_credit_limit=settings.original_credit_limit if settings else 0,
    )
