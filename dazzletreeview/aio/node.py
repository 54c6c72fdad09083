"""Tree node handles.

A handle is created for every rendered data node. It gets its data and
level from the node factory at construction, registers itself with the
tree, and exposes per-node state (level, expansion, position in its
sibling group) and per-node actions (expand, focus, activate).
"""

from typing import Any, List, Optional

from .._common.differ import KeyedDiffer
from .._common.events import EventStream
from ..config import NodeType
from ..errors import StructuralIntegrityError
from .view import ViewContainer


class TreeNode:
    """Handle for a node rendered in a flat (linear) container.

    Args:
        tree: Owning ``TreeView``
        data: The data node rendered by this handle
        level: Level computed when the node was inserted
        container: ``ViewContainer`` the handle lives in
    """

    node_type = NodeType.FLAT

    def __init__(self, tree: Any, data: Any, level: int = 0, container: Optional[ViewContainer] = None):
        self._tree = tree
        self._data = data
        self.insert_level = level
        self.container = container
        self.is_disabled = False
        self.label: Optional[str] = None
        self.tab_index = -1
        self.focused = False
        self._is_expandable: Optional[bool] = None
        self._destroyed = False

        self.data_changes: EventStream[Any] = EventStream()
        self.expanded_change: EventStream[bool] = EventStream()
        self.activation: EventStream[Any] = EventStream()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._data!r})"

    # Lifecycle

    def init(self) -> None:
        """Register with the tree; the first registration fixes the node type."""
        self._tree._register_node(self)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._destroyed = True
        self._tree._unregister_node(self)
        self.container = None
        self.data_changes.complete()
        self.expanded_change.complete()
        self.activation.complete()

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    # Data

    @property
    def data(self) -> Any:
        return self._data

    @data.setter
    def data(self, value: Any) -> None:
        if value is self._data:
            return
        previous = self._data
        self._data = value
        self._tree._node_data_changed(self, previous)
        self.data_changes.emit(value)

    # Structure

    @property
    def level(self) -> int:
        """0-indexed level from the tree's cache, else from the container chain.

        Raises:
            StructuralIntegrityError: if the handle is not attached anywhere
        """
        level = self._tree.get_level(self._data)
        if level is not None:
            return level
        return self._parent_level() + 1

    def _parent_level(self) -> int:
        if self.container is None:
            raise StructuralIntegrityError()
        owner = self.container.owner
        if owner is self._tree:
            return -1
        return owner.level

    @property
    def aria_level(self) -> int:
        return self.level + 1

    @property
    def set_size(self) -> int:
        return self._tree.get_set_size(self._data)

    @property
    def position_in_set(self) -> int:
        return self._tree.get_position_in_set(self._data)

    def get_parent(self) -> Optional['TreeNode']:
        return self._tree.get_parent(self)

    def get_children(self) -> List[Any]:
        return self._tree.get_children(self)

    # Expansion

    @property
    def is_expandable(self) -> bool:
        if self._is_expandable is not None:
            return self._is_expandable
        return self._tree._is_expandable(self._data)

    @is_expandable.setter
    def is_expandable(self, value: Optional[bool]) -> None:
        self._is_expandable = value

    @property
    def is_expanded(self) -> bool:
        return self._tree.is_expanded(self._data)

    @property
    def aria_expanded(self) -> Optional[bool]:
        """None for leaves, so no expanded state is announced."""
        if not self.is_expandable:
            return None
        return self.is_expanded

    def expand(self) -> None:
        if self.is_expandable:
            self._tree.expand(self._data)

    def collapse(self) -> None:
        if self.is_expandable:
            self._tree.collapse(self._data)

    def toggle(self) -> None:
        if self.is_expandable:
            self._tree.toggle(self._data)

    def _emit_expanded_change(self, expanded: bool) -> None:
        self.expanded_change.emit(expanded)

    # Focus and activation

    def focus(self) -> None:
        self.tab_index = 0
        self.focused = True
        self._tree._focus_node(self)

    def unfocus(self) -> None:
        self.tab_index = -1
        self.focused = False

    def make_focusable(self) -> None:
        self.tab_index = 0

    def activate(self) -> None:
        if self.is_disabled:
            return
        self.activation.emit(self._data)


class NestedTreeNode(TreeNode):
    """Handle that renders its own children while it is expanded."""

    node_type = NodeType.NESTED

    def __init__(self, tree: Any, data: Any, level: int = 0, container: Optional[ViewContainer] = None):
        super().__init__(tree, data, level, container)
        self.children_container = ViewContainer(self)
        self.differ = KeyedDiffer(tree._track_by)

    def update_children_nodes(self) -> None:
        """Bring the children container in line with the current caches."""
        self._tree._render_nested_children(self)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self.children_container.clear()
        self.differ.reset()
        super().destroy()
