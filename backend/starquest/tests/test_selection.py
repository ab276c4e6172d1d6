"""Tests for batch selection state."""

import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from starquest.selection import BatchSelection


def test_leaving_selection_mode_clears_selection():
    batch = BatchSelection()
    batch.set_selection_mode(True)
    batch.toggle_selection("a")
    batch.select_all(["b", "c"])
    batch.set_selection_mode(False)
    assert batch.selected_ids == frozenset()
    assert batch.selection_mode is False

    batch.set_selection_mode(True)
    batch.toggle_selection("x")
    batch.exit_selection_mode()
    assert batch.selected_ids == frozenset()
    assert batch.selection_mode is False


def test_select_all_replaces_selection():
    batch = BatchSelection()
    batch.set_selection_mode(True)
    batch.select_all(["a", "b"])
    batch.select_all(["c"])
    assert "a" not in batch.selected_ids
    assert "b" not in batch.selected_ids
    assert batch.selected_ids == {"c"}


def test_toggle_adds_then_removes():
    batch = BatchSelection()
    batch.set_selection_mode(True)
    batch.toggle_selection("a")
    assert batch.selected_ids == {"a"}
    batch.toggle_selection("a")
    assert batch.selected_ids == frozenset()


def test_selection_edits_apply_before_entering_selection_mode():
    batch = BatchSelection()
    batch.select_all(["a", "b"])
    batch.select_all(["c"])
    assert "a" not in batch.selected_ids
    assert "b" not in batch.selected_ids
    assert batch.selected_ids == {"c"}
    assert batch.selection_mode is False

    batch.toggle_selection("d")
    assert batch.selected_ids == {"c", "d"}


def test_switching_mode_off_clears_selection_made_outside_mode():
    batch = BatchSelection()
    batch.toggle_selection("a")
    batch.set_selection_mode(False)
    assert batch.selected_ids == frozenset()


def test_clear_keeps_selection_mode():
    batch = BatchSelection.from_ids(["a", "b"])
    batch.clear_selection()
    assert batch.selection_mode is True
    assert batch.selected_ids == frozenset()


def test_processing_flag_and_reason_are_independent():
    batch = BatchSelection.from_ids(["a"])
    batch.set_is_batch_processing(True)
    batch.batch_reject_reason = "late"
    batch.exit_selection_mode()
    assert batch.is_batch_processing is True
    assert batch.batch_reject_reason == "late"
