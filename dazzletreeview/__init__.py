"""DazzleTreeView - Hierarchical Tree Rendering Engine.

DazzleTreeView turns tree-shaped application data, flat (every node
knows its level) or nested (every node knows its children, possibly
asynchronously), into one ordered render list, and keeps level, parent,
sibling-set and expansion state consistent while data and expansion
change.

    from dazzletreeview import TreeConfig
    from dazzletreeview.aio import TreeView

Pure building blocks live in ``dazzletreeview._common``; test helpers for
consumers live in ``dazzletreeview.testing``.
"""

__version__ = "0.1.0"

from . import aio
from .config import TreeConfig, NodeType, Orientation, CyclePolicy
from .errors import (
    TreeError,
    ConfigurationError,
    MissingNodeTemplateError,
    AmbiguousDefaultTemplateError,
    StructuralIntegrityError,
    InvalidDataSourceError,
    CyclicTreeError,
)
from ._common import ExpansionModel, ExpansionChange, NodeDef

__all__ = [
    "__version__",
    "aio",
    # Configuration
    "TreeConfig",
    "NodeType",
    "Orientation",
    "CyclePolicy",
    # Errors
    "TreeError",
    "ConfigurationError",
    "MissingNodeTemplateError",
    "AmbiguousDefaultTemplateError",
    "StructuralIntegrityError",
    "InvalidDataSourceError",
    "CyclicTreeError",
    # Building blocks
    "ExpansionModel",
    "ExpansionChange",
    "NodeDef",
]
