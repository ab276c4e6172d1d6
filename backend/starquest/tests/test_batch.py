"""Tests for the batch payload builders and the batch orchestrator."""

import asyncio
import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from starquest.actions import ActivityActions, RedemptionActions
from starquest.batch import (
    StoreResponse,
    build_approval_payload,
    build_rejection_payload,
    execute_batch_update,
    handle_batch_operation,
)
from starquest.exceptions import BatchOperationError
from starquest.models import StarTransaction
from starquest.selection import BatchSelection


class FakeStore:
    def __init__(self, error=None, delay=0):
        self.error = error
        self.delay = delay
        self.calls = []
        self.deleted = []

    async def update(self, table, ids, data):
        self.calls.append((table, list(ids), data))
        if self.delay:
            await asyncio.sleep(self.delay)
        return StoreResponse(error=self.error)

    async def delete(self, table, item_id):
        self.deleted.append((table, item_id))
        return StoreResponse(error=self.error)


class FakeRouter:
    def __init__(self):
        self.refreshes = 0

    async def refresh(self):
        self.refreshes += 1


def test_rejection_payload_whitespace_reason_is_null():
    payload = build_rejection_payload("  ")
    assert "parent_response" in payload
    assert payload["parent_response"] is None
    assert payload["status"] == "rejected"


def test_rejection_payload_trims_reason():
    payload = build_rejection_payload("  not done  ", "parent-1")
    assert payload["parent_response"] == "not done"
    assert payload["reviewed_by"] == "parent-1"


def test_approval_payload_omits_reviewer():
    payload = build_approval_payload()
    assert set(payload) == {"status", "reviewed_at"}
    assert payload["status"] == "approved"


def test_approval_payload_keeps_given_timestamp():
    payload = build_approval_payload("parent-1", "2026-02-15T12:00:00.000Z")
    assert payload == {
        "status": "approved",
        "reviewed_at": "2026-02-15T12:00:00.000Z",
        "reviewed_by": "parent-1",
    }


def test_successful_batch_clears_selection_and_refreshes():
    async def run():
        batch = BatchSelection.from_ids(["id1", "id2"])
        store = FakeStore()
        router = FakeRouter()
        payload = build_rejection_payload("late")
        succeeded = []

        await handle_batch_operation(
            batch=batch,
            store=store,
            router=router,
            table="star_transactions",
            data=payload,
            on_success=lambda: succeeded.append(True),
        )

        assert len(store.calls) == 1
        table, ids, data = store.calls[0]
        assert table == "star_transactions"
        assert sorted(ids) == ["id1", "id2"]
        assert data == payload
        assert succeeded == [True]
        assert batch.selected_ids == frozenset()
        assert batch.selection_mode is False
        assert batch.is_batch_processing is False
        assert router.refreshes == 1

    asyncio.run(run())


def test_failed_batch_keeps_selection():
    async def run():
        batch = BatchSelection.from_ids(["id1", "id2"])
        error = {"message": "x"}
        store = FakeStore(error=error)
        router = FakeRouter()
        errors = []

        await handle_batch_operation(
            batch=batch,
            store=store,
            router=router,
            table="star_transactions",
            data=build_approval_payload(),
            on_error=errors.append,
        )

        assert errors == [error]
        assert batch.selected_ids == {"id1", "id2"}
        assert batch.selection_mode is True
        assert batch.is_batch_processing is False
        assert router.refreshes == 0

    asyncio.run(run())


def test_empty_selection_does_nothing():
    async def run():
        batch = BatchSelection()
        store = FakeStore()
        router = FakeRouter()
        await handle_batch_operation(
            batch=batch,
            store=store,
            router=router,
            table="redemptions",
            data=build_approval_payload(),
        )
        assert store.calls == []
        assert router.refreshes == 0

    asyncio.run(run())


def test_processing_flag_reset_when_error_callback_raises():
    async def run():
        batch = BatchSelection.from_ids(["id1"])

        def on_error(error):
            raise BatchOperationError("failed", error)

        with pytest.raises(BatchOperationError):
            await handle_batch_operation(
                batch=batch,
                store=FakeStore(error="boom"),
                router=FakeRouter(),
                table="redemptions",
                data=build_approval_payload(),
                on_error=on_error,
            )
        assert batch.is_batch_processing is False
        assert batch.selected_ids == {"id1"}

    asyncio.run(run())


def test_execute_batch_update_times_out():
    async def run():
        result = await execute_batch_update(
            FakeStore(delay=1), "redemptions", ["id1"], {"status": "approved"}, timeout=0.01
        )
        assert result.success is False
        assert isinstance(result.error, asyncio.TimeoutError)

    asyncio.run(run())


def test_activity_batch_reject_requires_reason():
    async def run():
        batch = BatchSelection.from_ids(["id1"])
        batch.batch_reject_reason = "   "
        store = FakeStore()
        actions = ActivityActions(batch, store, FakeRouter())
        assert await actions.batch_reject("parent-1") == 0
        assert store.calls == []

        batch.batch_reject_reason = "not finished"
        assert await actions.batch_reject("parent-1") == 1
        assert store.calls[0][2]["parent_response"] == "not finished"
        assert batch.batch_reject_reason == ""

    asyncio.run(run())


def test_activity_batch_approve_failure_raises_code():
    async def run():
        batch = BatchSelection.from_ids(["id1"])
        actions = ActivityActions(batch, FakeStore(error="down"), FakeRouter())
        with pytest.raises(BatchOperationError) as excinfo:
            await actions.batch_approve("parent-1")
        assert excinfo.value.code == "activity.batchApproveFailed"
        assert excinfo.value.error == "down"
        assert batch.selected_ids == {"id1"}

    asyncio.run(run())


def test_activity_delete_only_accepts_star_transactions():
    async def run():
        store = FakeStore()
        router = FakeRouter()
        actions = ActivityActions(BatchSelection(), store, router)
        with pytest.raises(BatchOperationError) as excinfo:
            await actions.delete(object())
        assert excinfo.value.code == "activity.canOnlyDeleteStars"
        assert store.deleted == []

        tx = StarTransaction(
            id="tx1", family_id="f1", child_id="c1", stars=3,
            source="child_request", created_by="c1",
        )
        await actions.delete(tx)
        assert store.deleted == [("star_transactions", "tx1")]
        assert router.refreshes == 1
        assert actions.deleting_id is None

    asyncio.run(run())


def test_redemption_batch_reject_allows_empty_reason():
    async def run():
        batch = BatchSelection.from_ids(["r1", "r2"])
        store = FakeStore()
        actions = RedemptionActions(batch, store, FakeRouter())
        assert await actions.batch_reject("parent-1") == 2
        assert store.calls[0][2]["parent_response"] is None

    asyncio.run(run())


def test_redemption_approve_uses_picked_date():
    async def run():
        store = FakeStore()
        router = FakeRouter()
        actions = RedemptionActions(BatchSelection(), store, router)
        await actions.approve("r1", "2026-02-15", "parent-1")
        table, ids, data = store.calls[0]
        assert table == "redemptions"
        assert ids == ["r1"]
        assert data["reviewed_at"] == "2026-02-15T12:00:00.000Z"
        assert router.refreshes == 1
        assert actions.processing_id is None

    asyncio.run(run())


def test_redemption_reject_failure_raises_code():
    async def run():
        actions = RedemptionActions(BatchSelection(), FakeStore(error="x"), FakeRouter())
        with pytest.raises(BatchOperationError) as excinfo:
            await actions.reject("r1", "no", "parent-1")
        assert excinfo.value.code == "admin.rejectFailed"
        assert actions.processing_id is None

    asyncio.run(run())
