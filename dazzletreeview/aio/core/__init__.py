"""Core async building blocks: data sources, traversal and computation."""

from .data_source import (
    DataSource,
    ArrayDataSource,
    DataSourceAdapter,
    is_data_source,
)
from .traverser import NestedTreeTraverser, TraversalResult, resolve_children
from .computer import RenderingData, RenderingDataComputer

__all__ = [
    # Data sources
    'DataSource',
    'ArrayDataSource',
    'DataSourceAdapter',
    'is_data_source',
    # Traversal
    'NestedTreeTraverser',
    'TraversalResult',
    'resolve_children',
    # Computation
    'RenderingData',
    'RenderingDataComputer',
]
