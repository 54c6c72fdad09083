"""Testing utilities for DazzleTreeView consumers."""

from .fixtures import (
    FlatNode,
    NestedNode,
    RecordingRenderer,
    RecordingKeyManager,
    TreeCacheHelper,
    rendered_tree,
)

__all__ = [
    'FlatNode',
    'NestedNode',
    'RecordingRenderer',
    'RecordingKeyManager',
    'TreeCacheHelper',
    'rendered_tree',
]
