"""Nested tree traversal.

Walks recursively nested data depth-first, pre-order, in document order.
Children are resolved through the configured children accessor, which may
answer synchronously or asynchronously. Every node is recorded in the
cache regardless of expansion; collapsed nodes simply contribute nothing
to the visible output below them.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Set

from ..._common.cache import TreeCache
from ...config import CyclePolicy
from ...errors import CyclicTreeError

logger = logging.getLogger(__name__)


async def resolve_children(value: Any) -> List[Any]:
    """Normalize whatever a children accessor returned into a list.

    Accepts ``None``, sequences and other iterables, awaitables, push
    streams (first emission, or the current value of a behavior stream)
    and async iterables (first item).
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if inspect.isawaitable(value):
        return await resolve_children(await value)
    if callable(getattr(value, 'subscribe', None)):
        return await _first_emission(value)
    if hasattr(value, '__aiter__'):
        return await _first_item(value)
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Children must be a collection, got {type(value).__name__}")
    return list(value)


async def _first_emission(stream: Any) -> List[Any]:
    if hasattr(stream, 'value'):
        value = stream.value
        return list(value) if value is not None else []

    future = asyncio.get_running_loop().create_future()

    def on_next(value):
        if not future.done():
            future.set_result(value)

    def on_error(exc):
        if not future.done():
            future.set_exception(exc)

    def on_complete():
        # Completing without a value means no children
        if not future.done():
            future.set_result(None)

    subscription = stream.subscribe(on_next, on_error, on_complete)
    try:
        value = await future
    finally:
        subscription.unsubscribe()
    return list(value) if value is not None else []


async def _first_item(iterable: Any) -> List[Any]:
    iterator = iterable.__aiter__()
    try:
        item = await iterator.__anext__()
    except StopAsyncIteration:
        item = None
    finally:
        aclose = getattr(iterator, 'aclose', None)
        if aclose is not None:
            await aclose()
    return list(item) if item is not None else []


@dataclass
class TraversalResult:
    """Output of one traversal."""
    flattened: List[Any] = field(default_factory=list)
    visible: List[Any] = field(default_factory=list)
    roots: List[Any] = field(default_factory=list)


class NestedTreeTraverser:
    """Depth-first flattener for nested data.

    Args:
        children_of: Children accessor (sync or async)
        key_of: Expansion key of a node
        is_expanded: Whether a node is currently expanded
        cycle_policy: How revisited keys and over-deep subtrees are treated
        max_depth: Deepest level allowed, None for unlimited
        children_memo: Resolved children by key, shared across traversals
            of the same data so the accessor is called once per node
    """

    def __init__(
        self,
        children_of: Callable[[Any], Any],
        key_of: Callable[[Any], Hashable],
        is_expanded: Callable[[Any], bool],
        cycle_policy: CyclePolicy = CyclePolicy.RAISE,
        max_depth: Optional[int] = None,
        children_memo: Optional[Dict[Hashable, List[Any]]] = None,
    ):
        self.children_of = children_of
        self.key_of = key_of
        self.is_expanded = is_expanded
        self.cycle_policy = cycle_policy
        self.max_depth = max_depth
        self.children_memo = children_memo if children_memo is not None else {}

    async def get_children(self, node: Any) -> List[Any]:
        """Resolved children of ``node``, fetched at most once per memo."""
        key = self.key_of(node)
        if key not in self.children_memo:
            children = await resolve_children(self.children_of(node))
            self.children_memo[key] = children
        return self.children_memo[key]

    async def traverse(self, roots: List[Any], cache: TreeCache) -> TraversalResult:
        """Flatten ``roots`` into ``cache`` and return the linear views.

        Raises:
            CyclicTreeError: on a revisited key or a too deep subtree when
                the cycle policy is RAISE
        """
        result = TraversalResult()
        visited: Set[Hashable] = set()
        result.roots = await self._visit(roots, 0, None, True, cache, visited, result)
        cache.set_aria_set(None, result.roots)
        return result

    async def _visit(
        self,
        nodes: List[Any],
        level: int,
        parent: Optional[Any],
        visible: bool,
        cache: TreeCache,
        visited: Set[Hashable],
        result: TraversalResult,
    ) -> List[Any]:
        kept = []
        for node in nodes:
            key = self.key_of(node)
            if key in visited:
                if self.cycle_policy is CyclePolicy.RAISE:
                    raise CyclicTreeError(f"Node {key!r} appears more than once in the tree", key=key)
                logger.warning("Skipping repeated node %r at level %d", key, level)
                continue
            visited.add(key)
            kept.append(node)

            cache.record(node, level, parent)
            result.flattened.append(node)
            if visible:
                result.visible.append(node)

            children = await self.get_children(node)
            if children and self.max_depth is not None and level >= self.max_depth:
                if self.cycle_policy is CyclePolicy.RAISE:
                    raise CyclicTreeError(
                        f"Node {key!r} has children below max_depth {self.max_depth}", key=key
                    )
                logger.warning("Pruning children of %r below max_depth %d", key, self.max_depth)
                children = []

            kept_children = await self._visit(
                children,
                level + 1,
                node,
                visible and self.is_expanded(node),
                cache,
                visited,
                result,
            )
            cache.set_aria_set(node, kept_children)
        return kept
