"""Family scoping checks shared by the route modules."""

from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.crud import count_family_rows, get_family_child
from starquest.models import User


async def ensure_family_child(db: AsyncSession, parent: User, child_id: str) -> User:
    child = await get_family_child(db, parent.family_id, child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Child not found")
    return child


async def ensure_family_rows(
    db: AsyncSession,
    model,
    family_id: str,
    ids: list[str],
    status: Optional[str] = None,
) -> list[str]:
    """Return ``ids`` deduplicated, or 404 if any id is outside the family.

    When ``status`` is given every row must also be in that status, so a
    batch review can only touch items that are still waiting for one.
    """
    unique_ids = list(dict.fromkeys(ids))
    if unique_ids:
        found = await count_family_rows(db, model, family_id, unique_ids, status)
        if found != len(unique_ids):
            raise HTTPException(status_code=404, detail="Item not found")
    return unique_ids
