"""Credit ledger arithmetic and the interest tier table.

Everything here is pure: balances and credit settings come in as plain
numbers and the results go straight into response models.  Debt and the
remaining credit line are tracked independently, so a child who is already
in debt still has their remaining credit available to spend.

The tier schedule is reference data for display.  Interest itself is
accrued by the monthly settlement job, which lives outside this service.
"""

import math
from typing import NamedTuple, Optional, Protocol, Sequence

from starquest.exceptions import InvalidTierScheduleError
from starquest.schemas.credit import ChildBalanceWithCredit


class TierLike(Protocol):
    tier_order: int
    min_debt: int
    max_debt: Optional[int]
    interest_rate: float


class TierSpec(NamedTuple):
    tier_order: int
    min_debt: int
    max_debt: Optional[int]
    interest_rate: float


# Matches the defaults seeded for a new family.
DEFAULT_INTEREST_TIERS: tuple[TierSpec, ...] = (
    TierSpec(1, 0, 19, 0.05),
    TierSpec(2, 20, 49, 0.10),
    TierSpec(3, 50, None, 0.15),
)


def get_credit_used(balance: int) -> int:
    """Return the amount of credit in use; zero unless the balance is negative."""
    return abs(balance) if balance < 0 else 0


def get_available_credit(
    balance: int, credit_limit: int, credit_enabled: bool
) -> int:
    """Return the unused part of the credit line, never below zero."""
    if not credit_enabled:
        return 0
    used = get_credit_used(balance)
    return max(credit_limit - used, 0)


def calculate_total_spendable(
    balance: int, credit_enabled: bool, available_credit: int
) -> int:
    """Return what a child may spend right now.

    A negative balance contributes nothing, it is not subtracted from the
    available credit.
    """
    if not credit_enabled:
        return max(balance, 0)
    return max(balance, 0) + available_credit


def credit_usage_percent(credit_used: int, credit_limit: int) -> float:
    if credit_limit <= 0:
        return 0.0
    return credit_used * 100 / credit_limit


def format_interest_rate(rate: float) -> str:
    """Render a decimal rate as a whole percentage, e.g. ``0.05`` -> ``"5%"``."""
    return f"{math.floor(rate * 100 + 0.5)}%"


def format_debt_range(min_debt: int, max_debt: Optional[int]) -> str:
    if max_debt is None:
        return f"{min_debt}+"
    return f"{min_debt}-{max_debt}"


def next_tier_order(tiers: Sequence[TierLike]) -> int:
    if not tiers:
        return 1
    return max(t.tier_order for t in tiers) + 1


def validate_interest_tiers(tiers: Sequence[TierLike]) -> None:
    """Check that ``tiers`` partition ``[0, inf)`` with rising rates.

    Raises :class:`InvalidTierScheduleError` describing the first problem
    found.  An empty schedule is rejected as well.
    """
    if not tiers:
        raise InvalidTierScheduleError("At least one interest tier is required")

    ordered = sorted(tiers, key=lambda t: t.tier_order)
    expected_min = 0
    previous_rate: Optional[float] = None
    for position, tier in enumerate(ordered, start=1):
        if tier.tier_order != position:
            raise InvalidTierScheduleError(
                f"Tier order must be contiguous from 1 (found {tier.tier_order} at position {position})"
            )
        if tier.interest_rate < 0:
            raise InvalidTierScheduleError(
                f"Tier {tier.tier_order} has a negative interest rate"
            )
        if tier.min_debt != expected_min:
            raise InvalidTierScheduleError(
                f"Tier {tier.tier_order} must start at {expected_min}, not {tier.min_debt}"
            )
        if previous_rate is not None and tier.interest_rate <= previous_rate:
            raise InvalidTierScheduleError(
                f"Tier {tier.tier_order} rate must be higher than the tier before it"
            )
        is_last = position == len(ordered)
        if tier.max_debt is None:
            if not is_last:
                raise InvalidTierScheduleError(
                    f"Only the last tier may be unbounded (tier {tier.tier_order})"
                )
        else:
            if tier.max_debt < tier.min_debt:
                raise InvalidTierScheduleError(
                    f"Tier {tier.tier_order} max_debt is below its min_debt"
                )
            if is_last:
                raise InvalidTierScheduleError("The last tier must be unbounded")
            expected_min = tier.max_debt + 1
        previous_rate = tier.interest_rate


def _as_specs(tiers: Sequence[TierLike]) -> list[TierSpec]:
    return [
        TierSpec(t.tier_order, t.min_debt, t.max_debt, t.interest_rate)
        for t in sorted(tiers, key=lambda t: t.tier_order)
    ]


def append_tier(
    tiers: Sequence[TierLike],
    min_debt: int,
    max_debt: Optional[int],
    interest_rate: float,
) -> list[TierSpec]:
    """Return the schedule with a new highest tier added.

    When the current last tier is unbounded it is capped just below
    ``min_debt`` so the new tier can take over the open end.
    """
    specs = _as_specs(tiers)
    if specs and specs[-1].max_debt is None and min_debt > specs[-1].min_debt:
        specs[-1] = specs[-1]._replace(max_debt=min_debt - 1)
    specs.append(TierSpec(next_tier_order(specs), min_debt, max_debt, interest_rate))
    return specs


def update_tier(
    tiers: Sequence[TierLike], tier_order: int, **changes
) -> list[TierSpec]:
    specs = _as_specs(tiers)
    return [
        s._replace(**changes) if s.tier_order == tier_order else s for s in specs
    ]


def remove_tier(tiers: Sequence[TierLike], tier_order: int) -> list[TierSpec]:
    """Return the schedule without ``tier_order``, renumbered from 1.

    The removed range is absorbed by the tier above it, or by the tier
    below it when the top tier is removed.
    """
    specs = _as_specs(tiers)
    index = next((i for i, s in enumerate(specs) if s.tier_order == tier_order), None)
    if index is None:
        raise InvalidTierScheduleError(f"No tier with order {tier_order}")
    removed = specs.pop(index)
    if index < len(specs):
        specs[index] = specs[index]._replace(min_debt=removed.min_debt)
    elif specs:
        specs[-1] = specs[-1]._replace(max_debt=removed.max_debt)
    return [s._replace(tier_order=i) for i, s in enumerate(specs, start=1)]


def build_child_balance(
    *,
    child_id: str,
    family_id: str,
    name: str,
    current_stars: int,
    lifetime_stars: int,
    credit_enabled: bool = False,
    credit_limit: int = 0,
    original_credit_limit: int = 0,
) -> ChildBalanceWithCredit:
    """Combine raw ledger fields and credit settings into a display row."""
    available = get_available_credit(current_stars, credit_limit, credit_enabled)
    used = get_credit_used(current_stars)
    return ChildBalanceWithCredit(
        child_id=child_id,
        family_id=family_id,
        name=name,
        current_stars=current_stars,
        lifetime_stars=lifetime_stars,
        credit_enabled=credit_enabled,
        credit_limit=credit_limit,
        original_credit_limit=original_credit_limit,
        credit_used=used,
        available_credit=available,
        spendable_stars=calculate_total_spendable(
            current_stars, credit_enabled, available
        ),
        credit_usage_percent=credit_usage_percent(used, credit_limit),
    )
