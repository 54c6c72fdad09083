"""Pure building blocks shared by the tree engine.

Nothing in this internal package awaits, schedules or touches a view:
expansion state, node source resolution, structural caches, keyed
diffing and node definitions are all plain computation.

Important: This package must NEVER import from aio to avoid circular
dependencies.
"""

from .events import EventStream, BehaviorStream, Subscription
from .expansion import ExpansionModel, ExpansionChange
from .node_source import (
    NodeSource,
    FlatSource,
    NestedSource,
    NodeTypeResolver,
    resolve_node_source,
    default_expansion_key,
)
from .cache import TreeCache, find_children_by_level
from .differ import KeyedDiffer, DiffResult, DiffOperation, IdentityChange
from .templates import NodeDef, NodeDefRegistry

__all__ = [
    'EventStream',
    'BehaviorStream',
    'Subscription',
    'ExpansionModel',
    'ExpansionChange',
    'NodeSource',
    'FlatSource',
    'NestedSource',
    'NodeTypeResolver',
    'resolve_node_source',
    'default_expansion_key',
    'TreeCache',
    'find_children_by_level',
    'KeyedDiffer',
    'DiffResult',
    'DiffOperation',
    'IdentityChange',
    'NodeDef',
    'NodeDefRegistry',
]
