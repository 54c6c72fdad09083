"""Tree engine.

``TreeView`` ties everything together. Upstream events (new root data,
expansion changes, the rendering mode becoming known) are queued and
drained synchronously; each drain (re)starts a single compute task. A
newer event cancels the computation in flight, and a computation only
commits its caches if it is still the current one, so results for stale
data never become visible.

Typical use::

    config = TreeConfig.nested(lambda node: node.children)
    async with TreeView(config, renderer, data_source=roots) as tree:
        tree.mark_painted()
        await tree.flush()
        tree.expand(roots[0])
        await tree.flush()
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Hashable, Iterable, List, Optional

from .._common.cache import TreeCache
from .._common.differ import INSERT, REMOVE, DiffResult, KeyedDiffer
from .._common.events import EventStream, Subscription
from .._common.expansion import ExpansionChange, ExpansionModel
from .._common.node_source import NodeTypeResolver, default_expansion_key, resolve_node_source
from .._common.templates import NodeDef, NodeDefRegistry
from ..config import NodeType, TreeConfig
from ..errors import ConfigurationError, InvalidDataSourceError
from .core.computer import RenderingData, RenderingDataComputer
from .core.data_source import DataSourceAdapter
from .key_manager import KeyManagerBridge
from .node import NestedTreeNode, TreeNode
from .view import PaintGate, ViewContainer, ViewRenderer

logger = logging.getLogger(__name__)


# Upstream events

@dataclass
class DataChanged:
    nodes: List[Any]


@dataclass
class ExpansionChanged:
    change: ExpansionChange


@dataclass
class NodeTypeResolved:
    node_type: NodeType


@dataclass
class _DataGeneration:
    """One emission of root data plus the children resolved for it."""
    nodes: List[Any]
    children_memo: Dict[Hashable, List[Any]] = field(default_factory=dict)


class TreeView:
    """Hierarchical tree engine.

    Must be started and driven from inside a running event loop.

    Args:
        config: Tree configuration; exactly one node source must be set
        renderer: Host view renderer
        node_defs: Node definitions; None renders every node as a plain
            ``TreeNode`` with a ``None`` template
        data_source: Initial data (sequence, push stream, async iterable
            or ``DataSource``)
        key_manager_factory: Builds the keyboard navigation strategy from
            the item stream and ``KeyManagerOptions``

    Raises:
        ConfigurationError: on missing, duplicate or invalid configuration
        AmbiguousDefaultTemplateError: if several node definitions lack ``when``
        InvalidDataSourceError: if ``data_source`` has an unsupported shape
    """

    def __init__(
        self,
        config: TreeConfig,
        renderer: ViewRenderer,
        node_defs: Optional[Iterable[NodeDef]] = None,
        data_source: Any = None,
        key_manager_factory: Optional[Callable[..., Any]] = None,
    ):
        problems = config.validate()
        if problems:
            raise ConfigurationError("Invalid tree configuration: " + "; ".join(problems))

        self.config = config
        self.node_source = resolve_node_source(config)
        self.tree_control = config.tree_control
        self.renderer = renderer
        self.node_defs = NodeDefRegistry([NodeDef(None)] if node_defs is None else node_defs)

        if self.tree_control is not None and getattr(self.tree_control, 'expansion_model', None) is not None:
            self.expansion_model = self.tree_control.expansion_model
        else:
            self.expansion_model = ExpansionModel()
        self._key_fn = self._resolve_expansion_key()

        self.node_type_resolver = NodeTypeResolver()
        self.container = ViewContainer(self)
        self.cache = TreeCache(self.expansion_key)
        self._differ = KeyedDiffer(self._track_by)
        self._paint_gate = PaintGate(enabled=config.defer_until_painted)
        self._computer = RenderingDataComputer(
            self.node_source,
            self.expansion_key,
            self._is_node_expanded,
            cycle_policy=config.cycle_policy,
            max_depth=config.max_depth,
        )
        self._rendering_data = RenderingData()
        self._generation = _DataGeneration([])
        self._nodes: Dict[Hashable, TreeNode] = {}
        self._active_node: Optional[TreeNode] = None

        self._events: Deque[Any] = deque()
        self._draining = False
        self._rendering = False
        self._recompute_pending = False
        self._compute_task: Optional[asyncio.Task] = None
        self._compute_version = 0
        self._last_error: Optional[BaseException] = None
        self.errors: EventStream[BaseException] = EventStream()

        self.key_manager_bridge = KeyManagerBridge(self, config.orientation)
        self.key_manager: Any = None
        self._key_manager_factory = key_manager_factory

        self._data_adapter = DataSourceAdapter(self._on_data, self._on_source_error)
        if data_source is not None and not self._data_adapter.supports(data_source):
            raise InvalidDataSourceError()
        self._data_source = data_source
        self._subscriptions: List[Subscription] = []
        self._started = False
        self._closed = False

    # Lifecycle

    def start(self) -> 'TreeView':
        """Subscribe to upstream changes and attach the data source."""
        if self._started:
            return self
        self._started = True
        self._subscriptions.append(
            self.expansion_model.changed.subscribe(lambda change: self._post(ExpansionChanged(change)))
        )
        self._subscriptions.append(self.node_type_resolver.changes.subscribe(self._on_node_type))
        self.key_manager = self.key_manager_bridge.build(self._key_manager_factory)
        if self._data_source is not None:
            self._data_adapter.switch(self._data_source, self)
        return self

    def close(self) -> None:
        """Detach everything and remove all rendered nodes."""
        if self._closed:
            return
        self._closed = True
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []
        self._data_adapter.close()
        if self._compute_task is not None and not self._compute_task.done():
            self._compute_task.cancel()
        self._compute_task = None

        self._rendering = True
        try:
            for index in range(len(self.container) - 1, -1, -1):
                self.renderer.remove(self.container, index)
                self.container.remove(index)
        finally:
            self._rendering = False
        self._differ.reset()
        self.key_manager_bridge.destroy()
        self.key_manager = None
        self.errors.complete()

    async def __aenter__(self) -> 'TreeView':
        return self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return None

    def mark_painted(self) -> None:
        """Report the host's first paint; replays view work queued until now."""
        try:
            self._paint_gate.mark_painted()
        except Exception as exc:
            self._report_error(exc)

    @property
    def is_painted(self) -> bool:
        return self._paint_gate.painted

    async def flush(self) -> None:
        """Wait until no computation is pending.

        Raises:
            Exception: the most recent operational error, if any
        """
        while True:
            await asyncio.sleep(0)
            task = self._compute_task
            if task is None or task.done():
                break
            await asyncio.wait({task})

        error, self._last_error = self._last_error, None
        if error is not None:
            raise error

    # Data source

    @property
    def data_source(self) -> Any:
        return self._data_source

    @data_source.setter
    def data_source(self, source: Any) -> None:
        if source is self._data_source:
            return
        if source is not None and not self._data_adapter.supports(source):
            raise InvalidDataSourceError()
        self._data_source = source
        if self._started:
            self._data_adapter.switch(source, self)

    def _on_data(self, nodes: List[Any]) -> None:
        self._generation = _DataGeneration(list(nodes))
        if self.tree_control is not None:
            self.tree_control.data_nodes = list(nodes)
        self._post(DataChanged(self._generation.nodes))

    def _on_source_error(self, exc: BaseException) -> None:
        self._report_error(exc)

    def _on_node_type(self, node_type: Optional[NodeType]) -> None:
        if node_type is not None:
            self._post(NodeTypeResolved(node_type))

    # Event queue and computation

    def _post(self, event: Any) -> None:
        self._events.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._events:
                self._handle_event(self._events.popleft())
        finally:
            self._draining = False

    def _handle_event(self, event: Any) -> None:
        if isinstance(event, ExpansionChanged):
            self._notify_expanded_change(event.change)
        logger.debug("Tree event: %s", type(event).__name__)
        self._schedule_compute()

    def _notify_expanded_change(self, change: ExpansionChange) -> None:
        for key in change.added:
            handle = self._nodes.get(key)
            if handle is not None:
                handle._emit_expanded_change(True)
        for key in change.removed:
            handle = self._nodes.get(key)
            if handle is not None:
                handle._emit_expanded_change(False)

    def _schedule_compute(self) -> None:
        if self._closed:
            return
        if self._rendering:
            self._recompute_pending = True
            return
        if self._compute_task is not None and not self._compute_task.done():
            logger.debug("Cancelling stale tree computation")
            self._compute_task.cancel()
        self._compute_version += 1
        loop = asyncio.get_running_loop()
        self._compute_task = loop.create_task(self._compute(self._compute_version))

    async def _compute(self, version: int) -> None:
        generation = self._generation
        node_type = self.node_type_resolver.value
        try:
            data, cache = await self._computer.compute(
                generation.nodes, node_type, generation.children_memo
            )
            if version != self._compute_version or generation is not self._generation:
                logger.debug("Dropping rendering data for superseded tree data")
                return
            self._commit(data, cache)
        except Exception as exc:
            self._report_error(exc)

    def _commit(self, data: RenderingData, cache: TreeCache) -> None:
        self.cache = cache
        self._rendering_data = data
        logger.debug(
            "Committed tree data: %d rendered, %d flattened, %d visible",
            len(data.render_nodes), len(data.flattened_nodes), len(data.visible_nodes),
        )
        render_nodes = data.render_nodes
        self._paint_gate.run(lambda: self._run_render(render_nodes))

    def _report_error(self, exc: BaseException) -> None:
        logger.error("Tree computation failed: %s", exc)
        self._last_error = exc
        self.errors.emit(exc)

    # Rendering

    def _run_render(self, render_nodes: List[Any]) -> None:
        self._rendering = True
        try:
            result = self._differ.diff(render_nodes)
            if result is not None:
                self._apply_changes(self.container, result, None)
            for handle in list(self.container):
                if isinstance(handle, NestedTreeNode):
                    handle.update_children_nodes()
            self.key_manager_bridge.refresh()
        finally:
            self._rendering = False

        if self._recompute_pending:
            self._recompute_pending = False
            if self._compute_task is not None and self._compute_task is asyncio.current_task():
                self._compute_task = None
            self._schedule_compute()

    def _render_nested_children(self, handle: NestedTreeNode) -> None:
        if handle.destroyed:
            return
        children = self.cache.children_of(handle.data) if self.is_expanded(handle.data) else []
        result = handle.differ.diff(children)
        if result is not None:
            self._apply_changes(handle.children_container, result, handle.data)
        for child in list(handle.children_container):
            if isinstance(child, NestedTreeNode):
                child.update_children_nodes()

    def _apply_changes(self, container: ViewContainer, result: DiffResult, parent_data: Any) -> None:
        for operation in result.operations:
            if operation.kind == INSERT:
                self._insert_node(container, operation.item, operation.current_index, parent_data)
            elif operation.kind == REMOVE:
                self.renderer.remove(container, operation.previous_index)
                container.remove(operation.previous_index)
            else:
                self.renderer.move(container, operation.previous_index, operation.current_index)
                container.move(operation.previous_index, operation.current_index)

        for change in result.identity_changes:
            handle = container.get(change.index)
            handle.data = change.item
            self.renderer.update(handle, change.item)

    def _insert_node(self, container: ViewContainer, data: Any, index: int, parent_data: Any = None) -> None:
        node_def = self.node_defs.get_node_def(data, index)
        level = self._context_level(data, parent_data)
        factory = node_def.node_factory or TreeNode
        handle = factory(self, data, level, container)
        handle.init()
        self.renderer.insert(container, node_def.template, handle, index)
        container.insert(handle, index)

    def _context_level(self, data: Any, parent_data: Any) -> int:
        if self.node_source.is_flat:
            return self.node_source.level_of(data)
        level = self.cache.level(data)
        if level is not None:
            return level
        if parent_data is not None:
            parent_level = self.cache.level(parent_data)
            if parent_level is not None:
                return parent_level + 1
        return 0

    # Node registration

    def _register_node(self, handle: TreeNode) -> None:
        self.node_type_resolver.set_if_unset(handle.node_type)
        self._nodes[self.expansion_key(handle.data)] = handle

    def _unregister_node(self, handle: TreeNode) -> None:
        key = self.expansion_key(handle.data)
        if self._nodes.get(key) is handle:
            del self._nodes[key]
        if self._active_node is handle:
            self._active_node = None
        if not self._rendering:
            self.key_manager_bridge.refresh()

    def _node_data_changed(self, handle: TreeNode, previous: Any) -> None:
        previous_key = self.expansion_key(previous)
        if self._nodes.get(previous_key) is handle:
            del self._nodes[previous_key]
        self._nodes[self.expansion_key(handle.data)] = handle

    def _focus_node(self, handle: TreeNode) -> None:
        if self._active_node is not None and self._active_node is not handle:
            self._active_node.unfocus()
        self._active_node = handle
        self.key_manager_bridge.focus_item(handle)

    # Identity

    def _resolve_expansion_key(self) -> Callable[[Any], Hashable]:
        if self.config.expansion_key is not None:
            return self.config.expansion_key
        control_key = getattr(self.tree_control, 'key', None)
        if control_key is not None:
            return control_key
        return default_expansion_key

    def expansion_key(self, node: Any) -> Hashable:
        return self._key_fn(node)

    def _track_by(self, index: int, node: Any) -> Hashable:
        if self.config.track_by is not None:
            return self.config.track_by(index, node)
        return self.expansion_key(node)

    def _is_node_expanded(self, node: Any) -> bool:
        return self.expansion_model.is_expanded(self.expansion_key(node))

    def _is_expandable(self, node: Any) -> bool:
        if self.tree_control is not None:
            return bool(self.tree_control.is_expandable(node))
        return bool(self.cache.children_of(node))

    def _subtree_keys(self, node: Any) -> List[Hashable]:
        keys = [self.expansion_key(node)]
        keys.extend(self.expansion_key(child) for child in self.cache.descendants_of(node))
        return keys

    # Rendering data

    @property
    def node_type(self) -> Optional[NodeType]:
        return self.node_type_resolver.value

    @property
    def render_nodes(self) -> List[Any]:
        return list(self._rendering_data.render_nodes)

    @property
    def flattened_nodes(self) -> List[Any]:
        return list(self._rendering_data.flattened_nodes)

    @property
    def visible_nodes(self) -> List[Any]:
        return list(self._rendering_data.visible_nodes)

    # Expansion operations

    def is_expanded(self, node: Any) -> bool:
        if self.tree_control is not None:
            return self.tree_control.is_expanded(node)
        return self._is_node_expanded(node)

    def toggle(self, node: Any) -> None:
        if self.tree_control is not None:
            self.tree_control.toggle(node)
        else:
            self.expansion_model.toggle(self.expansion_key(node))

    def expand(self, node: Any) -> None:
        if self.tree_control is not None:
            self.tree_control.expand(node)
        else:
            self.expansion_model.expand(self.expansion_key(node))

    def collapse(self, node: Any) -> None:
        if self.tree_control is not None:
            self.tree_control.collapse(node)
        else:
            self.expansion_model.collapse(self.expansion_key(node))

    def toggle_descendants(self, node: Any) -> None:
        if self.tree_control is not None:
            self.tree_control.toggle_descendants(node)
        elif self.is_expanded(node):
            self.collapse_descendants(node)
        else:
            self.expand_descendants(node)

    def expand_descendants(self, node: Any) -> None:
        """Expand ``node`` and all of its descendants in one batch."""
        if self.tree_control is not None:
            self.tree_control.expand_descendants(node)
        else:
            self.expansion_model.expand(*self._subtree_keys(node))

    def collapse_descendants(self, node: Any) -> None:
        """Collapse ``node`` and all of its descendants in one batch."""
        if self.tree_control is not None:
            self.tree_control.collapse_descendants(node)
        else:
            self.expansion_model.collapse(*self._subtree_keys(node))

    def expand_all(self) -> None:
        if self.tree_control is not None:
            self.tree_control.expand_all()
        else:
            self.expansion_model.expand(*[self.expansion_key(node) for node in self.flattened_nodes])

    def collapse_all(self) -> None:
        if self.tree_control is not None:
            self.tree_control.collapse_all()
        else:
            self.expansion_model.collapse(*[self.expansion_key(node) for node in self.flattened_nodes])

    # Structural queries

    def get_level(self, node: Any) -> Optional[int]:
        """0-indexed level of ``node``, None if the cache does not know it."""
        return self.cache.level(node)

    def get_set_size(self, node: Any) -> int:
        return self.cache.set_size(node)

    def get_position_in_set(self, node: Any) -> int:
        return self.cache.position_in_set(node)

    def get_parent(self, handle: TreeNode) -> Optional[TreeNode]:
        """Handle of the parent of ``handle``'s data, if it is rendered."""
        parent = self.cache.parent(handle.data)
        if parent is None:
            return None
        return self._nodes.get(self.expansion_key(parent))

    def get_children(self, handle: TreeNode) -> List[Any]:
        """Direct children data of ``handle``'s data."""
        return self.cache.children_of(handle.data)

    def get_node(self, node: Any) -> Optional[TreeNode]:
        """Registered handle rendering ``node``, if any."""
        return self._nodes.get(self.expansion_key(node))

    # Keyboard

    def handle_keydown(self, event: Any) -> None:
        self.key_manager_bridge.handle_keydown(event)
