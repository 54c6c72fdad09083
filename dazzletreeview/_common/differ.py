"""Keyed list differ.

Compares the previously rendered list with the new one by key and
produces operations that can be applied one after the other to a
container holding the old list to turn it into the new list.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, List, Optional, Sequence


INSERT = 'insert'
REMOVE = 'remove'
MOVE = 'move'


@dataclass
class DiffOperation:
    """One structural change.

    ``previous_index`` is set for removes and moves, ``current_index`` for
    inserts and moves. Indices refer to the container state at the moment
    the operation is applied.
    """
    kind: str
    item: Any
    previous_index: Optional[int] = None
    current_index: Optional[int] = None


@dataclass
class IdentityChange:
    """A key stayed in place but its item object was replaced."""
    index: int
    item: Any
    previous_item: Any


@dataclass
class DiffResult:
    operations: List[DiffOperation] = field(default_factory=list)
    identity_changes: List[IdentityChange] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.operations or self.identity_changes)


class KeyedDiffer:
    """Stateful differ remembering the last list it was given.

    Args:
        track_by: Returns the key of an item given its index and the item
    """

    def __init__(self, track_by: Callable[[int, Any], Hashable]):
        self.track_by = track_by
        self._items: List[Any] = []
        self._keys: List[Hashable] = []

    @property
    def items(self) -> List[Any]:
        return list(self._items)

    def reset(self) -> None:
        self._items = []
        self._keys = []

    def diff(self, items: Sequence[Any]) -> Optional[DiffResult]:
        """Diff ``items`` against the previous list and remember them.

        Returns:
            The changes, or None if nothing changed
        """
        items = list(items)
        new_keys = [self.track_by(index, item) for index, item in enumerate(items)]
        result = DiffResult()

        # Removals first, from the end so indices stay valid
        available = Counter(new_keys)
        working = []
        for index in range(len(self._items) - 1, -1, -1):
            key = self._keys[index]
            if available[key] > 0:
                available[key] -= 1
                working.append([key, self._items[index]])
            else:
                result.operations.append(
                    DiffOperation(REMOVE, self._items[index], previous_index=index)
                )
        working.reverse()

        for index, (key, item) in enumerate(zip(new_keys, items)):
            if index < len(working) and working[index][0] == key:
                entry = working[index]
            else:
                source = None
                for candidate in range(index + 1, len(working)):
                    if working[candidate][0] == key:
                        source = candidate
                        break
                if source is None:
                    working.insert(index, [key, item])
                    result.operations.append(
                        DiffOperation(INSERT, item, current_index=index)
                    )
                    continue
                entry = working.pop(source)
                working.insert(index, entry)
                result.operations.append(
                    DiffOperation(MOVE, item, previous_index=source, current_index=index)
                )

            if entry[1] is not item:
                result.identity_changes.append(IdentityChange(index, item, entry[1]))
                entry[1] = item

        self._items = items
        self._keys = new_keys
        return result if result else None
