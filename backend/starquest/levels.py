"""Level progress from a child's lifetime stars."""

from typing import NamedTuple, Optional, Protocol, Sequence


class LevelLike(Protocol):
    level_number: int
    stars_required: int


class LevelProgress(NamedTuple):
    current: LevelLike
    next: Optional[LevelLike]
    stars_to_next: int
    progress_percent: float


def level_progress(
    levels: Sequence[LevelLike], lifetime_stars: int
) -> Optional[LevelProgress]:
    """Find the highest level reached and the distance to the next one.

    The lowest level counts as current even before its threshold is met.
    Returns ``None`` when the family has no levels.
    """
    ordered = sorted(levels, key=lambda lvl: lvl.stars_required)
    if not ordered:
        return None

    current, nxt = ordered[0], ordered[1] if len(ordered) > 1 else None
    for index, level in enumerate(ordered):
        if lifetime_stars < level.stars_required:
            break
        current = level
        nxt = ordered[index + 1] if index + 1 < len(ordered) else None

    if nxt is None:
        return LevelProgress(current, None, 0, 100.0)
    span = nxt.stars_required - current.stars_required
    percent = (lifetime_stars - current.stars_required) * 100 / span if span else 100.0
    percent = max(percent, 0.0)
    return LevelProgress(current, nxt, nxt.stars_required - lifetime_stars, percent)
