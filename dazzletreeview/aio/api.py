"""High-level async API for DazzleTreeView.

One-shot helpers that lay out tree data without building a ``TreeView``:
no renderer, no node handles, no event queue. Useful for tests, exports
and anything else that only needs the linear views of a tree.
"""

from typing import Any, AsyncIterator, Callable, Hashable, Iterable, List, Optional, Tuple

from .._common.cache import TreeCache
from .._common.node_source import default_expansion_key, resolve_node_source
from ..config import NodeType, TreeConfig
from .core.computer import RenderingData, RenderingDataComputer


async def compute_rendering_data(
    config: TreeConfig,
    nodes: Iterable[Any],
    expanded: Iterable[Any] = (),
    node_type: NodeType = NodeType.FLAT,
) -> Tuple[RenderingData, TreeCache]:
    """Compute rendering data for ``nodes`` as a tree would.

    Args:
        config: Tree configuration (exactly one node source)
        nodes: Root data, or every node for flat data
        expanded: Data nodes to treat as expanded
        node_type: Rendering mode to compute for

    Returns:
        Tuple of (RenderingData, TreeCache)

    Raises:
        ConfigurationError: if the node source configuration is unusable

    Example:
        >>> data, cache = await compute_rendering_data(
        ...     TreeConfig.nested(lambda n: n['children']), roots, expanded=[roots[0]])
        >>> [n['name'] for n in data.visible_nodes]
    """
    node_source = resolve_node_source(config)
    key_of = config.expansion_key or default_expansion_key
    expanded_keys = {key_of(node) for node in expanded}

    computer = RenderingDataComputer(
        node_source,
        key_of,
        lambda node: key_of(node) in expanded_keys,
        cycle_policy=config.cycle_policy,
        max_depth=config.max_depth,
    )
    return await computer.compute(list(nodes), node_type, {})


async def flatten_tree(
    roots: Iterable[Any],
    children_of: Callable[[Any], Any],
    key_of: Optional[Callable[[Any], Hashable]] = None,
) -> List[Any]:
    """Complete pre-order list of a nested tree, ignoring expansion.

    Args:
        roots: Root data nodes
        children_of: Children accessor (sync or async)
        key_of: Optional expansion key function

    Returns:
        Every node in pre-order
    """
    config = TreeConfig.nested(children_of, expansion_key=key_of)
    data, _ = await compute_rendering_data(config, roots)
    return data.flattened_nodes


async def visible_nodes(
    config: TreeConfig,
    nodes: Iterable[Any],
    expanded: Iterable[Any] = (),
) -> List[Any]:
    """Nodes that would be shown with only ``expanded`` nodes expanded."""
    data, _ = await compute_rendering_data(config, nodes, expanded)
    return data.visible_nodes


async def traverse_with_level(
    config: TreeConfig,
    nodes: Iterable[Any],
    expanded: Optional[Iterable[Any]] = None,
) -> AsyncIterator[Tuple[Any, int]]:
    """Yield ``(node, level)`` pairs in pre-order.

    Args:
        config: Tree configuration (exactly one node source)
        nodes: Root data, or every node for flat data
        expanded: If given, only nodes visible under this expansion set
            are yielded; otherwise every node is

    Yields:
        Tuples of (data node, 0-indexed level)

    Example:
        >>> async for node, level in traverse_with_level(config, roots):
        ...     print(f"{'  ' * level}{node['name']}")
    """
    data, cache = await compute_rendering_data(config, nodes, expanded or ())
    ordered = data.flattened_nodes if expanded is None else data.visible_nodes
    for node in ordered:
        yield node, cache.level(node)
