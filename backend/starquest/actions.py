"""Review actions for the activity list and the redemption queue.

These wrap the batch helpers with the rules each queue applies before a
mutation is attempted.  A failed store call surfaces as
:class:`~starquest.exceptions.BatchOperationError` whose ``code`` is the
message key shown to the parent.
"""

import logging
from typing import Any, Callable, Optional

from starquest.batch import (
    Navigator,
    StoreClient,
    build_approval_payload,
    build_rejection_payload,
    execute_batch_update,
    handle_batch_operation,
)
from starquest.date_utils import to_approval_timestamp
from starquest.exceptions import BatchOperationError
from starquest.models import StarTransaction, Redemption
from starquest.selection import BatchSelection

logger = logging.getLogger(__name__)


def _raise(code: str) -> Callable[[Any], None]:
    def on_error(error: Any) -> None:
        raise BatchOperationError(code, error)

    return on_error


class ActivityActions:
    """Batch approve, batch reject and single delete for star transactions."""

    table = StarTransaction.__tablename__

    def __init__(self, batch: BatchSelection, store: StoreClient, router: Navigator):
        self.batch = batch
        self.store = store
        self.router = router
        self.deleting_id: Optional[str] = None

    async def batch_approve(self, reviewed_by: Optional[str] = None) -> int:
        count = len(self.batch.selected_ids)
        if count == 0:
            return 0
        await handle_batch_operation(
            batch=self.batch,
            store=self.store,
            router=self.router,
            table=self.table,
            data=build_approval_payload(reviewed_by),
            on_error=_raise("activity.batchApproveFailed"),
        )
        return count

    async def batch_reject(self, reviewed_by: Optional[str] = None) -> int:
        count = len(self.batch.selected_ids)
        if count == 0 or not self.batch.batch_reject_reason.strip():
            return 0

        def reset_reason() -> None:
            self.batch.batch_reject_reason = ""

        await handle_batch_operation(
            batch=self.batch,
            store=self.store,
            router=self.router,
            table=self.table,
            data=build_rejection_payload(self.batch.batch_reject_reason, reviewed_by),
            on_success=reset_reason,
            on_error=_raise("activity.batchRejectFailed"),
        )
        return count

    async def delete(self, item: Any) -> None:
        """Delete one ledger entry; only star transactions can be deleted."""
        if not isinstance(item, StarTransaction):
            raise BatchOperationError("activity.canOnlyDeleteStars")

        self.deleting_id = item.id
        try:
            response = await self.store.delete(self.table, item.id)
            if response.error is not None:
                logger.error("Error deleting transaction %s: %s", item.id, response.error)
                raise BatchOperationError("activity.deleteFailed", response.error)
            await self.router.refresh()
        finally:
            self.deleting_id = None


class RedemptionActions:
    """Single and batch review of reward redemptions."""

    table = Redemption.__tablename__

    def __init__(self, batch: BatchSelection, store: StoreClient, router: Navigator):
        self.batch = batch
        self.store = store
        self.router = router
        self.processing_id: Optional[str] = None

    async def _update_one(self, redemption_id: str, data: dict, code: str) -> None:
        self.processing_id = redemption_id
        try:
            result = await execute_batch_update(
                self.store, self.table, [redemption_id], data
            )
            if not result.success:
                logger.error("Error updating redemption %s: %s", redemption_id, result.error)
                raise BatchOperationError(code, result.error)
            await self.router.refresh()
        finally:
            self.processing_id = None

    async def approve(
        self,
        redemption_id: str,
        approval_date: Optional[str] = None,
        reviewed_by: Optional[str] = None,
    ) -> None:
        await self._update_one(
            redemption_id,
            build_approval_payload(reviewed_by, to_approval_timestamp(approval_date)),
            "admin.approveFailed",
        )

    async def reject(
        self, redemption_id: str, reason: str, reviewed_by: Optional[str] = None
    ) -> None:
        await self._update_one(
            redemption_id,
            build_rejection_payload(reason, reviewed_by),
            "admin.rejectFailed",
        )

    async def batch_approve(
        self, approval_date: Optional[str] = None, reviewed_by: Optional[str] = None
    ) -> int:
        count = len(self.batch.selected_ids)
        if count == 0:
            return 0
        await handle_batch_operation(
            batch=self.batch,
            store=self.store,
            router=self.router,
            table=self.table,
            data=build_approval_payload(reviewed_by, to_approval_timestamp(approval_date)),
            on_error=_raise("admin.batchApproveFailed"),
        )
        return count

    async def batch_reject(self, reviewed_by: Optional[str] = None) -> int:
        """Reject the selection; an empty reason is stored as no response."""
        count = len(self.batch.selected_ids)
        if count == 0:
            return 0

        def reset_reason() -> None:
            self.batch.batch_reject_reason = ""

        await handle_batch_operation(
            batch=self.batch,
            store=self.store,
            router=self.router,
            table=self.table,
            data=build_rejection_payload(self.batch.batch_reject_reason, reviewed_by),
            on_success=reset_reason,
            on_error=_raise("admin.batchRejectFailed"),
        )
        return count
