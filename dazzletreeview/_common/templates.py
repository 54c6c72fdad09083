"""Node definitions.

A node definition pairs a template (anything the view renderer knows how
to stamp out) with an optional ``when(data, index)`` predicate and the
factory used to build the node handle. At most one definition may omit
``when``; it becomes the default.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from ..errors import AmbiguousDefaultTemplateError, MissingNodeTemplateError


@dataclass
class NodeDef:
    """Template registration for tree nodes.

    Attributes:
        template: Opaque template handed to the renderer's ``insert``
        when: Optional ``when(data, index) -> bool`` predicate
        node_factory: Builds the handle as ``node_factory(tree, data,
            level, container)``. ``None`` means a plain ``TreeNode``.
    """
    template: Any
    when: Optional[Callable[[Any, int], bool]] = None
    node_factory: Optional[Callable[..., Any]] = None


class NodeDefRegistry:
    """Ordered collection of node definitions."""

    def __init__(self, node_defs: Iterable[NodeDef] = ()):
        self.node_defs: List[NodeDef] = []
        self.default_node_def: Optional[NodeDef] = None
        self.update(node_defs)

    def update(self, node_defs: Iterable[NodeDef]) -> None:
        """Replace the registered definitions.

        Raises:
            AmbiguousDefaultTemplateError: if several definitions lack ``when``
        """
        node_defs = list(node_defs)
        defaults = [node_def for node_def in node_defs if node_def.when is None]
        if len(defaults) > 1:
            raise AmbiguousDefaultTemplateError()
        self.node_defs = node_defs
        self.default_node_def = defaults[0] if defaults else None

    def get_node_def(self, data: Any, index: int) -> NodeDef:
        """Pick the definition used to render ``data`` at ``index``.

        A single registered definition is always used. Otherwise the first
        definition whose predicate matches wins, then the default.

        Raises:
            MissingNodeTemplateError: if nothing matches
        """
        if len(self.node_defs) == 1:
            return self.node_defs[0]

        for node_def in self.node_defs:
            if node_def.when is not None and node_def.when(data, index):
                return node_def

        if self.default_node_def is None:
            raise MissingNodeTemplateError()
        return self.default_node_def

    def __len__(self) -> int:
        return len(self.node_defs)
