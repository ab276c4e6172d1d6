"""Batch approve/reject over star transactions and redemptions.

The helpers here are shared by the activity and redemption review flows.
A batch is one ``UPDATE ... WHERE id IN (...)`` against the store; any
atomicity beyond that is whatever the database gives a single statement.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from starquest.crud import refresh_family_balances
from starquest.date_utils import utc_now_iso
from starquest.models import StarTransaction, Redemption
from starquest.selection import BatchSelection

logger = logging.getLogger(__name__)

BATCH_UPDATE_TIMEOUT = float(os.getenv("BATCH_UPDATE_TIMEOUT", "30"))


class ApprovalPayload(BaseModel):
    status: Literal["approved"]
    reviewed_at: str
    reviewed_by: Optional[str] = None


class RejectionPayload(BaseModel):
    status: Literal["rejected"]
    reviewed_at: str
    reviewed_by: Optional[str] = None
    parent_response: Optional[str] = None


def build_approval_payload(
    reviewed_by: Optional[str] = None, reviewed_at: Optional[str] = None
) -> dict[str, Any]:
    """Build the update applied when approving.

    ``reviewed_by`` is left out entirely when not given so the column keeps
    whatever value it had.
    """
    fields: dict[str, Any] = {
        "status": "approved",
        "reviewed_at": reviewed_at or utc_now_iso(),
    }
    if reviewed_by:
        fields["reviewed_by"] = reviewed_by
    return ApprovalPayload(**fields).model_dump(exclude_unset=True)


def build_rejection_payload(
    reason: str,
    reviewed_by: Optional[str] = None,
    reviewed_at: Optional[str] = None,
) -> dict[str, Any]:
    """Build the update applied when rejecting.

    ``parent_response`` is always written: the trimmed reason, or ``None``
    when nothing but whitespace was given.
    """
    fields: dict[str, Any] = {
        "status": "rejected",
        "parent_response": reason.strip() or None,
        "reviewed_at": reviewed_at or utc_now_iso(),
    }
    if reviewed_by:
        fields["reviewed_by"] = reviewed_by
    return RejectionPayload(**fields).model_dump(exclude_unset=True)


@dataclass
class StoreResponse:
    error: Any = None


@dataclass
class BatchResult:
    success: bool
    error: Any = None


class StoreClient(Protocol):
    async def update(
        self, table: str, ids: Sequence[str], data: dict[str, Any]
    ) -> StoreResponse: ...

    async def delete(self, table: str, item_id: str) -> StoreResponse: ...


class Navigator(Protocol):
    async def refresh(self) -> None: ...


class UnknownTableError(LookupError):
    pass


class SQLModelStore:
    """Store client backed by an ``AsyncSession``."""

    TABLES = {
        StarTransaction.__tablename__: StarTransaction,
        Redemption.__tablename__: Redemption,
    }

    def __init__(self, db: AsyncSession):
        self.db = db

    async def update(
        self, table: str, ids: Sequence[str], data: dict[str, Any]
    ) -> StoreResponse:
        model = self.TABLES.get(table)
        if model is None:
            return StoreResponse(error=UnknownTableError(table))
        stmt = update(model).where(model.id.in_(list(ids))).values(**data)
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            return StoreResponse(error=exc)
        return StoreResponse()

    async def delete(self, table: str, item_id: str) -> StoreResponse:
        model = self.TABLES.get(table)
        if model is None:
            return StoreResponse(error=UnknownTableError(table))
        try:
            row = await self.db.get(model, item_id)
            if row is not None:
                await self.db.delete(row)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            return StoreResponse(error=exc)
        return StoreResponse()


class BalanceRefresher:
    """Re-derive a family's cached balances after a mutation."""

    def __init__(self, db: AsyncSession, family_id: str):
        self.db = db
        self.family_id = family_id

    async def refresh(self) -> None:
        await refresh_family_balances(self.db, self.family_id)


async def execute_batch_update(
    store: StoreClient,
    table: str,
    ids: Sequence[str],
    data: dict[str, Any],
    timeout: Optional[float] = BATCH_UPDATE_TIMEOUT,
) -> BatchResult:
    """Apply ``data`` to every row of ``table`` whose id is in ``ids``.

    The store is called exactly once.  Its error is handed back as-is; there
    is no retry.
    """
    try:
        response = await asyncio.wait_for(store.update(table, ids, data), timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Batch update on %s timed out after %ss", table, timeout)
        return BatchResult(success=False, error=exc)
    if response.error is not None:
        return BatchResult(success=False, error=response.error)
    return BatchResult(success=True)


async def handle_batch_operation(
    *,
    batch: BatchSelection,
    store: StoreClient,
    router: Navigator,
    table: str,
    data: dict[str, Any],
    on_error: Optional[Callable[[Any], None]] = None,
    on_success: Optional[Callable[[], None]] = None,
) -> None:
    """Run one batch mutation over the current selection.

    On failure the selection is left alone so the same batch can be retried.
    On success the selection is cleared, selection mode is left and the view
    is refreshed.  The processing flag is reset either way.  Callers must not
    start a second batch while ``batch.is_batch_processing`` is set.
    """
    if not batch.selected_ids:
        return

    batch.set_is_batch_processing(True)
    try:
        ids = list(batch.selected_ids)
        result = await execute_batch_update(store, table, ids, data)

        if not result.success:
            logger.warning(
                "Batch update of %d %s rows failed: %s", len(ids), table, result.error
            )
            if on_error:
                on_error(result.error)
            return

        logger.info("Batch updated %d %s rows to %s", len(ids), table, data.get("status"))
        if on_success:
            on_success()
        batch.exit_selection_mode()
        await router.refresh()
    finally:
        batch.set_is_batch_processing(False)
