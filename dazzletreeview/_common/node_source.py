"""Node source resolution.

Two things have to be known before tree data can be laid out:

- how to discover structure: every node carries its level (``FlatSource``)
  or every node can produce its children (``NestedSource``). This is
  chosen once, when the tree is built.
- how nodes are rendered (``NodeType``). This is decided by the first
  node handle that registers with the tree and never changes afterwards.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Optional

from ..config import NodeType, TreeConfig
from ..errors import ConfigurationError
from .events import BehaviorStream


class NodeSource(ABC):
    """Tagged variant: ``FlatSource`` or ``NestedSource``."""

    node_type: NodeType

    @property
    def is_flat(self) -> bool:
        return self.node_type is NodeType.FLAT

    @property
    def is_nested(self) -> bool:
        return self.node_type is NodeType.NESTED


@dataclass(frozen=True)
class FlatSource(NodeSource):
    """Nodes are already linear and report their own level."""
    level_of: Callable[[Any], int]
    node_type = NodeType.FLAT


@dataclass(frozen=True)
class NestedSource(NodeSource):
    """Nodes are real trees; children are fetched on demand."""
    children_of: Callable[[Any], Any]
    node_type = NodeType.NESTED


def resolve_node_source(config: TreeConfig) -> NodeSource:
    """Pick the single configured node source.

    A legacy tree control contributes whichever of ``get_level`` or
    ``get_children`` it implements.

    Raises:
        ConfigurationError: if zero or more than one source is configured
    """
    count = config.node_source_count()
    if count == 0:
        raise ConfigurationError.missing_node_source()
    if count > 1:
        raise ConfigurationError.multiple_node_sources()

    if config.level_accessor is not None:
        return FlatSource(config.level_accessor)
    if config.children_accessor is not None:
        return NestedSource(config.children_accessor)

    control = config.tree_control
    get_level = getattr(control, 'get_level', None)
    if get_level is not None:
        return FlatSource(get_level)
    get_children = getattr(control, 'get_children', None)
    if get_children is not None:
        return NestedSource(get_children)
    raise ConfigurationError.missing_node_source()


def default_expansion_key(node: Any) -> Hashable:
    """Identify a node by itself, or by identity when it is unhashable."""
    try:
        hash(node)
    except TypeError:
        return id(node)
    return node


class NodeTypeResolver:
    """Holds the rendering mode once it becomes known."""

    def __init__(self):
        self.changes: BehaviorStream[Optional[NodeType]] = BehaviorStream(None)

    @property
    def value(self) -> Optional[NodeType]:
        return self.changes.value

    @property
    def is_resolved(self) -> bool:
        return self.changes.value is not None

    def set_if_unset(self, node_type: NodeType) -> bool:
        """Record ``node_type`` unless a type was already recorded.

        Returns:
            True if this call resolved the type
        """
        if self.changes.value is not None:
            return False
        self.changes.emit(node_type)
        return True
