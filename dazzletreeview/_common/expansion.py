"""Expansion model.

Tracks which expansion keys are currently expanded and emits
added/removed diffs on ``changed``. Every call that changes the set emits
exactly one event, so passing several keys to ``expand`` or ``collapse``
is an atomic batch as far as subscribers are concerned.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, List, Optional

from .events import EventStream


@dataclass
class ExpansionChange:
    """Event emitted when the set of expanded keys changed."""
    source: Any
    added: List[Hashable] = field(default_factory=list)
    removed: List[Hashable] = field(default_factory=list)


class ExpansionModel:
    """Multi-value set of expanded keys with change notifications.

    Args:
        initially_expanded: Keys expanded from the start (no event emitted)
        emit_changes: If False, ``changed`` never fires
        compare_with: Optional equality used instead of hashing to match
            a key against the stored ones
    """

    def __init__(
        self,
        initially_expanded: Iterable[Hashable] = (),
        emit_changes: bool = True,
        compare_with: Optional[Callable[[Any, Any], bool]] = None,
    ):
        self._emit_changes = emit_changes
        self.compare_with = compare_with
        self._expanded = {}  # insertion-ordered set
        self._added_to_emit: List[Hashable] = []
        self._removed_to_emit: List[Hashable] = []
        self._expanded_list: Optional[List[Hashable]] = None
        self.changed: EventStream[ExpansionChange] = EventStream()

        for key in initially_expanded:
            self._mark_expanded(key)
        # Preselected keys never fire a change event
        self._added_to_emit = []

    @property
    def expanded(self) -> List[Hashable]:
        """Expanded keys in the order they were expanded."""
        if self._expanded_list is None:
            self._expanded_list = list(self._expanded)
        return self._expanded_list

    def is_expanded(self, key: Hashable) -> bool:
        return self._concrete(key) in self._expanded

    def is_empty(self) -> bool:
        return not self._expanded

    def has_value(self) -> bool:
        return not self.is_empty()

    def expand(self, *keys: Hashable) -> bool:
        """Expand one or more keys.

        Returns:
            Whether the expansion set changed as a result of this call
        """
        for key in keys:
            self._mark_expanded(key)
        return self._flush()

    def collapse(self, *keys: Hashable) -> bool:
        """Collapse one or more keys.

        Returns:
            Whether the expansion set changed as a result of this call
        """
        for key in keys:
            self._unmark_expanded(key)
        return self._flush()

    def toggle(self, key: Hashable) -> bool:
        return self.collapse(key) if self.is_expanded(key) else self.expand(key)

    def set_expanded(self, *keys: Hashable) -> bool:
        """Replace the expanded set with exactly ``keys``."""
        previous = list(self._expanded)
        for key in keys:
            self._mark_expanded(key)
        wanted = [self._concrete(key) for key in keys]
        for key in previous:
            if not any(self._same(key, other) for other in wanted):
                self._unmark_expanded(key)
        return self._flush()

    def clear(self, flush_event: bool = True) -> bool:
        """Collapse everything.

        Args:
            flush_event: If False, the removal is emitted along with the
                next change instead of now
        """
        for key in list(self._expanded):
            self._unmark_expanded(key)
        changed = self._has_queued_changes()
        if flush_event:
            self._emit_change_event()
        return changed

    def _flush(self) -> bool:
        changed = self._has_queued_changes()
        self._emit_change_event()
        return changed

    def _emit_change_event(self) -> None:
        self._expanded_list = None
        if self._added_to_emit or self._removed_to_emit:
            event = ExpansionChange(
                source=self,
                added=self._added_to_emit,
                removed=self._removed_to_emit,
            )
            self._added_to_emit = []
            self._removed_to_emit = []
            self.changed.emit(event)

    def _mark_expanded(self, key: Hashable) -> None:
        key = self._concrete(key)
        self._expanded_list = None
        if key not in self._expanded:
            self._expanded[key] = None
            if self._emit_changes:
                self._added_to_emit.append(key)

    def _unmark_expanded(self, key: Hashable) -> None:
        key = self._concrete(key)
        self._expanded_list = None
        if key in self._expanded:
            del self._expanded[key]
            if self._emit_changes:
                self._removed_to_emit.append(key)

    def _has_queued_changes(self) -> bool:
        return bool(self._added_to_emit or self._removed_to_emit)

    def _same(self, a: Any, b: Any) -> bool:
        if self.compare_with is None:
            return a == b
        return self.compare_with(a, b)

    def _concrete(self, key: Hashable) -> Hashable:
        """Map ``key`` onto the stored key it compares equal to, if any."""
        if self.compare_with is None:
            return key
        for stored in self._expanded:
            if self.compare_with(key, stored):
                return stored
        return key
