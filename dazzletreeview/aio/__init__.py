"""Asynchronous tree engine of DazzleTreeView.

This package contains the asyncio engine that turns tree data into an
ordered render list and keeps view, caches and keyboard navigation in
sync as data and expansion state change.
"""

# Core building blocks
from .core import (
    DataSource,
    ArrayDataSource,
    DataSourceAdapter,
    NestedTreeTraverser,
    RenderingData,
    RenderingDataComputer,
    resolve_children,
)

# View bridge and node handles
from .view import ViewRenderer, ViewContainer, PaintGate
from .node import TreeNode, NestedTreeNode
from .key_manager import KeyManagerBridge, KeyManagerOptions

# Engine
from .tree import TreeView
from .tree_control import BaseTreeControl, FlatTreeControl, NestedTreeControl

# Error handling
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    ContinueOnErrorsPolicy,
    CollectErrorsPolicy,
    ThresholdPolicy,
)
from .error_handling import ErrorHandlingChildrenAccessor

# High-level API
from .api import (
    compute_rendering_data,
    flatten_tree,
    visible_nodes,
    traverse_with_level,
)

__all__ = [
    # Core
    'DataSource',
    'ArrayDataSource',
    'DataSourceAdapter',
    'NestedTreeTraverser',
    'RenderingData',
    'RenderingDataComputer',
    'resolve_children',
    # View
    'ViewRenderer',
    'ViewContainer',
    'PaintGate',
    'TreeNode',
    'NestedTreeNode',
    'KeyManagerBridge',
    'KeyManagerOptions',
    # Engine
    'TreeView',
    'BaseTreeControl',
    'FlatTreeControl',
    'NestedTreeControl',
    # Error handling
    'ErrorPolicy',
    'FailFastPolicy',
    'ContinueOnErrorsPolicy',
    'CollectErrorsPolicy',
    'ThresholdPolicy',
    'ErrorHandlingChildrenAccessor',
    # High-level API
    'compute_rendering_data',
    'flatten_tree',
    'visible_nodes',
    'traverse_with_level',
]
