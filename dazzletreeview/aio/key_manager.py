"""Keyboard navigation bridge.

The tree does not implement keyboard navigation itself. It publishes the
ordered list of navigable node handles and a few callbacks, and lets a
host supplied key manager do the rest.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional

from .._common.events import BehaviorStream
from ..config import Orientation

logger = logging.getLogger(__name__)


@dataclass
class KeyManagerOptions:
    """Everything a key manager needs besides the item list."""
    track_by: Callable[[Any], Hashable]
    skip_predicate: Callable[[Any], bool]
    orientation: Orientation = Orientation.LTR
    type_ahead_debounce_interval: Any = True


class KeyManagerBridge:
    """Publishes navigable handles in document order.

    Args:
        tree: Owning ``TreeView``
        orientation: Horizontal orientation passed to the key manager
    """

    def __init__(self, tree: Any, orientation: Orientation = Orientation.LTR):
        self._tree = tree
        self.orientation = orientation
        self.items: BehaviorStream[List[Any]] = BehaviorStream([])
        self.key_manager: Any = None

    def track_by(self, handle: Any) -> Hashable:
        return self._tree.expansion_key(handle.data)

    @staticmethod
    def skip_predicate(handle: Any) -> bool:
        return bool(handle.is_disabled)

    def options(self) -> KeyManagerOptions:
        return KeyManagerOptions(
            track_by=self.track_by,
            skip_predicate=self.skip_predicate,
            orientation=self.orientation,
        )

    def build(self, factory: Optional[Callable[[BehaviorStream, KeyManagerOptions], Any]]) -> Any:
        """Create the key manager through ``factory`` (None builds nothing)."""
        if factory is not None:
            self.key_manager = factory(self.items, self.options())
        return self.key_manager

    def refresh(self) -> None:
        """Recompute the item list; emits only when it changed."""
        handles = []
        for node in self._tree.flattened_nodes:
            handle = self._tree.get_node(node)
            if handle is not None:
                handles.append(handle)

        current = self.items.value
        if len(current) == len(handles) and all(a is b for a, b in zip(current, handles)):
            return
        logger.debug("Key manager items changed (%d navigable nodes)", len(handles))
        self.items.emit(handles)

    def handle_keydown(self, event: Any) -> None:
        on_keydown = getattr(self.key_manager, 'on_keydown', None)
        if on_keydown is not None:
            on_keydown(event)

    def focus_item(self, handle: Any) -> None:
        focus_item = getattr(self.key_manager, 'focus_item', None)
        if focus_item is not None:
            focus_item(handle)

    def destroy(self) -> None:
        destroy = getattr(self.key_manager, 'destroy', None)
        if destroy is not None:
            destroy()
        self.key_manager = None
        self.items.complete()
