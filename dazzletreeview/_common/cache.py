"""Parent / level / sibling-set cache.

The cache answers the structural questions a view needs for every node:
its level, its parent and the ordered group of siblings it belongs to
(the "aria set", used for set size and position in set).

Flat data rebuilds the whole cache on every run. Nested data fills a
fresh cache while it is traversed; the engine swaps it in once the
traversal finished.
"""

from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Tuple


class TreeCache:
    """Structural cache keyed by expansion key.

    Root nodes have parent ``None`` and share the aria set stored under
    the ``None`` key.
    """

    def __init__(self, key_of: Callable[[Any], Hashable]):
        self.key_of = key_of
        self.levels: Dict[Hashable, int] = {}
        self.parents: Dict[Hashable, Optional[Any]] = {}
        self.aria_sets: Dict[Optional[Hashable], List[Any]] = {}
        self.flattened: List[Any] = []

    def clear(self) -> None:
        self.levels.clear()
        self.parents.clear()
        self.aria_sets.clear()
        self.flattened = []

    def __len__(self) -> int:
        return len(self.flattened)

    def __contains__(self, node: Any) -> bool:
        return self.key_of(node) in self.levels

    # Recording

    def record(self, node: Any, level: int, parent: Optional[Any]) -> None:
        """Record one node in document order."""
        key = self.key_of(node)
        self.levels[key] = level
        self.parents[key] = parent
        self.flattened.append(node)

    def set_aria_set(self, parent: Optional[Any], children: Sequence[Any]) -> None:
        parent_key = None if parent is None else self.key_of(parent)
        self.aria_sets[parent_key] = list(children)

    def calculate_parents(self, flattened_nodes: Sequence[Any], level_of: Callable[[Any], int]) -> None:
        """Rebuild the whole cache from pre-flattened nodes.

        The parent of a node is the nearest preceding node with a strictly
        lower level; a node with no such predecessor is a root. A stack of
        open ancestors makes this a single forward pass.

        Args:
            flattened_nodes: Nodes in pre-order
            level_of: Returns the level of a node
        """
        self.clear()
        ancestors: List[Tuple[int, Any]] = []

        for node in flattened_nodes:
            level = level_of(node)
            while ancestors and ancestors[-1][0] >= level:
                ancestors.pop()
            parent = ancestors[-1][1] if ancestors else None

            self.record(node, level, parent)
            parent_key = None if parent is None else self.key_of(parent)
            self.aria_sets.setdefault(parent_key, []).append(node)

            ancestors.append((level, node))

    # Queries

    def level(self, node: Any) -> Optional[int]:
        return self.levels.get(self.key_of(node))

    def has_parent_record(self, node: Any) -> bool:
        return self.key_of(node) in self.parents

    def parent(self, node: Any) -> Optional[Any]:
        return self.parents.get(self.key_of(node))

    def aria_set(self, node: Any) -> List[Any]:
        """Sibling group of ``node``; a lone node is its own set."""
        parent = self.parent(node)
        parent_key = None if parent is None else self.key_of(parent)
        group = self.aria_sets.get(parent_key)
        return group if group is not None else [node]

    def set_size(self, node: Any) -> int:
        return len(self.aria_set(node))

    def position_in_set(self, node: Any) -> int:
        """1-based index of ``node`` in its sibling group, 0 if absent."""
        key = self.key_of(node)
        for index, sibling in enumerate(self.aria_set(node)):
            if self.key_of(sibling) == key:
                return index + 1
        return 0

    def children_of(self, node: Any) -> List[Any]:
        return list(self.aria_sets.get(self.key_of(node), []))

    def descendants_of(self, node: Any) -> List[Any]:
        """All descendants of ``node`` in pre-order."""
        results = []
        stack = list(reversed(self.children_of(node)))
        seen = set()
        while stack:
            current = stack.pop()
            key = self.key_of(current)
            if key in seen:
                continue
            seen.add(key)
            results.append(current)
            stack.extend(reversed(self.children_of(current)))
        return results

    def index_of(self, node: Any) -> int:
        key = self.key_of(node)
        for index, candidate in enumerate(self.flattened):
            if self.key_of(candidate) == key:
                return index
        return -1


def find_children_by_level(
    level_of: Callable[[Any], int],
    key_of: Callable[[Any], Hashable],
    flattened_nodes: Sequence[Any],
    node: Any,
    level_delta: float,
) -> List[Any]:
    """Find descendants of ``node`` in pre-flattened data.

    Scans forward from the node until a node at the same or a lower level
    shows up. ``level_delta`` of 1 gives direct children, ``float('inf')``
    gives all descendants.
    """
    key = key_of(node)
    start_index = -1
    for index, candidate in enumerate(flattened_nodes):
        if key_of(candidate) == key:
            start_index = index
            break
    if start_index < 0:
        return []

    node_level = level_of(node)
    expected_level = node_level + level_delta
    results = []
    for candidate in flattened_nodes[start_index + 1:]:
        current_level = level_of(candidate)
        if current_level <= node_level:
            break
        if current_level <= expected_level:
            results.append(candidate)
    return results
