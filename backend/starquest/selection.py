"""Selection state for batch review of pending items.

``BatchSelection`` holds which ids a parent has picked and whether a batch
mutation is in flight.  Every change goes through
:meth:`BatchSelection._transition`; switching selection mode off empties the
selection in that same step.  The selection itself can be edited in either
mode.
"""

from typing import Iterable, Optional


class BatchSelection:
    def __init__(self) -> None:
        self._selection_mode = False
        self._selected_ids: set[str] = set()
        self.is_batch_processing = False
        self.batch_reject_reason = ""

    @property
    def selection_mode(self) -> bool:
        return self._selection_mode

    @property
    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._selected_ids)

    def _transition(
        self, *, mode: Optional[bool] = None, ids: Optional[Iterable[str]] = None
    ) -> None:
        next_mode = self._selection_mode if mode is None else mode
        next_ids = set(self._selected_ids) if ids is None else set(ids)
        if mode is False:
            next_ids = set()
        self._selection_mode = next_mode
        self._selected_ids = next_ids

    def set_selection_mode(self, value: bool) -> None:
        """Enter or leave selection mode; leaving also clears the selection."""
        self._transition(mode=value)

    def toggle_selection(self, item_id: str) -> None:
        ids = set(self._selected_ids)
        if item_id in ids:
            ids.remove(item_id)
        else:
            ids.add(item_id)
        self._transition(ids=ids)

    def select_all(self, ids: Iterable[str]) -> None:
        """Replace the current selection with exactly ``ids``."""
        self._transition(ids=ids)

    def clear_selection(self) -> None:
        self._transition(ids=())

    def exit_selection_mode(self) -> None:
        self._transition(mode=False)

    def set_is_batch_processing(self, value: bool) -> None:
        self.is_batch_processing = value

    @classmethod
    def from_ids(cls, ids: Iterable[str]) -> "BatchSelection":
        """Build a selection already in selection mode holding ``ids``."""
        selection = cls()
        selection._transition(mode=True, ids=ids)
        return selection
