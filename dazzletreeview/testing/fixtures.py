"""Test fixtures for DazzleTreeView consumers.

These fixtures record what the engine asks of its collaborators and give
controlled access to internal state for testing purposes, without making
those internals part of the public API.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..aio.tree import TreeView
from ..aio.view import ViewRenderer


@dataclass
class FlatNode:
    """Pre-flattened sample node carrying its own level."""
    name: str
    level: int = 0
    expandable: bool = False

    def __hash__(self):
        return hash(self.name)


@dataclass
class NestedNode:
    """Nested sample node; children are plain lists."""
    name: str
    children: List['NestedNode'] = field(default_factory=list)

    def __hash__(self):
        return hash(self.name)


class RecordingRenderer(ViewRenderer):
    """View renderer that only records the calls it receives.

    Example:
        renderer = RecordingRenderer()
        tree = TreeView(config, renderer, data_source=nodes).start()
        tree.mark_painted()
        await tree.flush()
        assert renderer.count('insert') == 3
    """

    def __init__(self):
        self.calls: List[Tuple] = []

    def insert(self, container, template, node, index):
        self.calls.append(('insert', container, template, node.data, index))

    def remove(self, container, index):
        self.calls.append(('remove', container, index))

    def move(self, container, previous_index, current_index):
        self.calls.append(('move', container, previous_index, current_index))

    def update(self, node, data):
        self.calls.append(('update', node, data))

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)

    def reset(self) -> None:
        self.calls = []


class RecordingKeyManager:
    """Key manager that records item lists, keydown events and focus.

    Use the class itself as ``key_manager_factory``.
    """

    def __init__(self, items, options):
        self.options = options
        self.item_lists: List[List[Any]] = []
        self.keydown_events: List[Any] = []
        self.focused: List[Any] = []
        self.destroyed = False
        self._subscription = items.subscribe(self.item_lists.append)

    @property
    def items(self) -> List[Any]:
        return self.item_lists[-1] if self.item_lists else []

    def on_keydown(self, event: Any) -> None:
        self.keydown_events.append(event)

    def focus_item(self, item: Any) -> None:
        self.focused.append(item)

    def destroy(self) -> None:
        self.destroyed = True
        self._subscription.unsubscribe()


class TreeCacheHelper:
    """Public test fixture for cache verification.

    Example:
        helper = TreeCacheHelper(tree)
        assert helper.levels() == {'a': 0, 'b': 1}
        assert helper.was_node_cached(node)
    """

    def __init__(self, tree: TreeView):
        self._tree = tree

    def get_summary(self) -> Dict[str, Any]:
        """Returns high-level cache state for testing.

        Returns:
            Dictionary containing:
            - total_entries: Number of nodes with a cached level
            - root_count: Number of nodes without a parent
            - max_level: Deepest cached level (-1 when empty)
            - has_cache: Whether anything is cached
        """
        cache = self._tree.cache
        levels = list(cache.levels.values())
        return {
            'total_entries': len(levels),
            'root_count': sum(1 for parent in cache.parents.values() if parent is None),
            'max_level': max(levels) if levels else -1,
            'has_cache': bool(levels),
        }

    def was_node_cached(self, node: Any) -> bool:
        return node in self._tree.cache

    def levels(self) -> Dict[Any, int]:
        """Cached levels by expansion key."""
        return dict(self._tree.cache.levels)

    def parent_of(self, node: Any) -> Optional[Any]:
        return self._tree.cache.parent(node)

    def rendered(self) -> List[Any]:
        """Data currently rendered in the tree's own container."""
        return self._tree.container.data


def rendered_tree(tree: TreeView) -> List[Tuple[Any, int]]:
    """Depth-first ``(data, depth)`` of every rendered handle.

    Depth counts nested containers, so it equals the level for nested
    rendering and is always 0 for flat rendering.
    """
    results = []

    def walk(container, depth):
        for handle in container:
            results.append((handle.data, depth))
            children = getattr(handle, 'children_container', None)
            if children is not None:
                walk(children, depth + 1)

    walk(tree.container, 0)
    return results
