"""Legacy tree controls.

A tree control bundles a way to discover structure (``get_level`` or
``get_children``) with its own expansion model. Passing one as
``TreeConfig.tree_control`` makes the tree use both.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable, List, Optional

from .._common.cache import find_children_by_level
from .._common.expansion import ExpansionModel
from .._common.node_source import default_expansion_key


class BaseTreeControl(ABC):
    """Expansion operations shared by both control flavours.

    Args:
        track_by: Expansion key of a data node, defaults to the node itself
    """

    def __init__(self, track_by: Optional[Callable[[Any], Hashable]] = None):
        self.track_by = track_by
        self.expansion_model = ExpansionModel()
        self.data_nodes: List[Any] = []

    def key(self, data_node: Any) -> Hashable:
        if self.track_by is not None:
            return self.track_by(data_node)
        return default_expansion_key(data_node)

    @abstractmethod
    def get_descendants(self, data_node: Any) -> List[Any]:
        pass

    @abstractmethod
    def expand_all(self) -> None:
        pass

    def is_expandable(self, data_node: Any) -> bool:
        return bool(self.get_descendants(data_node))

    def is_expanded(self, data_node: Any) -> bool:
        return self.expansion_model.is_expanded(self.key(data_node))

    def expand(self, data_node: Any) -> None:
        self.expansion_model.expand(self.key(data_node))

    def collapse(self, data_node: Any) -> None:
        self.expansion_model.collapse(self.key(data_node))

    def toggle(self, data_node: Any) -> None:
        self.expansion_model.toggle(self.key(data_node))

    def expand_descendants(self, data_node: Any) -> None:
        keys = [self.key(data_node)]
        keys.extend(self.key(node) for node in self.get_descendants(data_node))
        self.expansion_model.expand(*keys)

    def collapse_descendants(self, data_node: Any) -> None:
        keys = [self.key(data_node)]
        keys.extend(self.key(node) for node in self.get_descendants(data_node))
        self.expansion_model.collapse(*keys)

    def toggle_descendants(self, data_node: Any) -> None:
        if self.is_expanded(data_node):
            self.collapse_descendants(data_node)
        else:
            self.expand_descendants(data_node)

    def collapse_all(self) -> None:
        self.expansion_model.clear()


class FlatTreeControl(BaseTreeControl):
    """Control for pre-flattened data.

    Args:
        get_level: Returns the level of a data node
        is_expandable: Returns whether a data node can be expanded
        track_by: Expansion key of a data node
    """

    def __init__(
        self,
        get_level: Callable[[Any], int],
        is_expandable: Callable[[Any], bool],
        track_by: Optional[Callable[[Any], Hashable]] = None,
    ):
        super().__init__(track_by)
        self.get_level = get_level
        self._is_expandable = is_expandable

    def is_expandable(self, data_node: Any) -> bool:
        return bool(self._is_expandable(data_node))

    def get_descendants(self, data_node: Any) -> List[Any]:
        """Nodes following ``data_node`` in ``data_nodes`` at a deeper level."""
        return find_children_by_level(self.get_level, self.key, self.data_nodes, data_node, float('inf'))

    def expand_all(self) -> None:
        self.expansion_model.expand(*[self.key(node) for node in self.data_nodes])


class NestedTreeControl(BaseTreeControl):
    """Control for nested data whose children are available synchronously.

    Args:
        get_children: Returns the children list of a data node
        is_expandable: Optional override, defaults to "has children"
        track_by: Expansion key of a data node
    """

    def __init__(
        self,
        get_children: Callable[[Any], Any],
        is_expandable: Optional[Callable[[Any], bool]] = None,
        track_by: Optional[Callable[[Any], Hashable]] = None,
    ):
        super().__init__(track_by)
        self.get_children = get_children
        self._is_expandable = is_expandable

    def is_expandable(self, data_node: Any) -> bool:
        if self._is_expandable is not None:
            return bool(self._is_expandable(data_node))
        return bool(self._children(data_node))

    def _children(self, data_node: Any) -> List[Any]:
        children = self.get_children(data_node)
        if children is None:
            return []
        if not isinstance(children, (list, tuple)):
            raise TypeError("NestedTreeControl needs get_children to return a list")
        return list(children)

    def get_descendants(self, data_node: Any) -> List[Any]:
        """All descendants of ``data_node`` in pre-order."""
        results = []
        seen = {self.key(data_node)}
        stack = list(reversed(self._children(data_node)))
        while stack:
            node = stack.pop()
            key = self.key(node)
            if key in seen:
                continue
            seen.add(key)
            results.append(node)
            stack.extend(reversed(self._children(node)))
        return results

    def expand_all(self) -> None:
        keys = []
        for node in self.data_nodes:
            keys.append(self.key(node))
            keys.extend(self.key(child) for child in self.get_descendants(node))
        self.expansion_model.expand(*keys)
