"""Rendering data computation.

Turns the latest root data into the lists the view needs, for each
combination of node source (flat or nested data) and rendering mode
(flat or nested node handles):

=============  ========  ======================  ====================
source         mode      render_nodes            flattened_nodes
=============  ========  ======================  ====================
FlatSource     FLAT      visible nodes           input as given
NestedSource   NESTED    roots                   full pre-order walk
FlatSource     NESTED    level-0 nodes           input as given
NestedSource   FLAT      visible nodes           full pre-order walk
=============  ========  ======================  ====================

Until the rendering mode is known the input is rendered as-is and no
cache is built.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from ..._common.cache import TreeCache
from ..._common.node_source import NodeSource
from ...config import CyclePolicy, NodeType
from .traverser import NestedTreeTraverser

logger = logging.getLogger(__name__)


@dataclass
class RenderingData:
    """Result of one computation."""
    render_nodes: List[Any] = field(default_factory=list)
    flattened_nodes: List[Any] = field(default_factory=list)
    visible_nodes: List[Any] = field(default_factory=list)
    node_type: Optional[NodeType] = None


class RenderingDataComputer:
    """Computes ``RenderingData`` and a fresh ``TreeCache`` for root data.

    Args:
        node_source: Resolved flat or nested node source
        key_of: Expansion key of a node
        is_expanded: Whether a node is currently expanded
        cycle_policy: Passed on to the nested traverser
        max_depth: Passed on to the nested traverser
    """

    def __init__(
        self,
        node_source: NodeSource,
        key_of: Callable[[Any], Hashable],
        is_expanded: Callable[[Any], bool],
        cycle_policy: CyclePolicy = CyclePolicy.RAISE,
        max_depth: Optional[int] = None,
    ):
        self.node_source = node_source
        self.key_of = key_of
        self.is_expanded = is_expanded
        self.cycle_policy = cycle_policy
        self.max_depth = max_depth

    async def compute(
        self,
        nodes: List[Any],
        node_type: Optional[NodeType],
        children_memo: Optional[Dict[Hashable, List[Any]]] = None,
    ) -> Tuple[RenderingData, TreeCache]:
        """Compute rendering data for ``nodes``.

        Args:
            nodes: Root data (every node for flat data)
            node_type: Rendering mode, None while unresolved
            children_memo: Resolved children shared by computations over
                the same data

        Returns:
            Tuple of (RenderingData, populated TreeCache)
        """
        cache = TreeCache(self.key_of)
        nodes = list(nodes)

        if node_type is None:
            return RenderingData(nodes, list(nodes), list(nodes), None), cache

        if self.node_source.is_flat:
            return self.compute_flat(nodes, node_type, cache), cache

        traverser = NestedTreeTraverser(
            self.node_source.children_of,
            self.key_of,
            self.is_expanded,
            cycle_policy=self.cycle_policy,
            max_depth=self.max_depth,
            children_memo=children_memo,
        )
        result = await traverser.traverse(nodes, cache)
        cache.flattened = list(result.flattened)
        logger.debug(
            "Traversed %d nested nodes (%d visible)", len(result.flattened), len(result.visible)
        )

        if node_type is NodeType.NESTED:
            render = list(result.roots)
        else:
            render = list(result.visible)
        return RenderingData(render, result.flattened, result.visible, node_type), cache

    def compute_flat(self, nodes: List[Any], node_type: NodeType, cache: TreeCache) -> RenderingData:
        """Synchronous part for pre-flattened data."""
        level_of = self.node_source.level_of
        cache.calculate_parents(nodes, level_of)
        visible = self.visible_from_cache(nodes, cache)

        if node_type is NodeType.NESTED:
            render = [node for node in nodes if level_of(node) == 0]
        else:
            render = visible
        return RenderingData(list(render), list(nodes), visible, node_type)

    def visible_from_cache(self, flattened: List[Any], cache: TreeCache) -> List[Any]:
        """Nodes whose ancestors are all expanded, in document order."""
        shown: Dict[Hashable, bool] = {}
        visible = []
        for node in flattened:
            parent = cache.parent(node)
            if parent is None:
                is_shown = True
            else:
                is_shown = shown.get(self.key_of(parent), False) and self.is_expanded(parent)
            shown[self.key_of(node)] = is_shown
            if is_shown:
                visible.append(node)
        return visible
