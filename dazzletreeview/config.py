"""Configuration system for DazzleTreeView.

This module defines how users describe their tree: how nodes are
discovered (level accessor, children accessor or a legacy tree control),
how nodes are identified, and how the engine behaves on bad input.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Hashable, List, Optional


class NodeType(Enum):
    """How nodes are materialized by the view.

    Decided by the first node handle that registers with the tree and
    frozen afterwards.
    """
    FLAT = "flat"        # Every visible node rendered in one linear container
    NESTED = "nested"    # Only roots at top level, children rendered per node


class Orientation(Enum):
    """Horizontal orientation handed to the key manager."""
    LTR = "ltr"
    RTL = "rtl"


class CyclePolicy(Enum):
    """What to do when nested children data revisits a node."""
    RAISE = "raise"   # Fail closed with CyclicTreeError
    SKIP = "skip"     # Drop the repeated node and keep going


@dataclass
class TreeConfig:
    """Complete configuration for a tree.

    Exactly one of ``level_accessor``, ``children_accessor`` and
    ``tree_control`` must be provided. This is checked by ``TreeView`` at
    construction time, not here, so that partially built configs can be
    passed around.
    """

    # Node discovery (exactly one)
    level_accessor: Optional[Callable[[Any], int]] = None
    children_accessor: Optional[Callable[[Any], Any]] = None
    tree_control: Optional[Any] = None

    # Identity
    expansion_key: Optional[Callable[[Any], Hashable]] = None
    track_by: Optional[Callable[[int, Any], Hashable]] = None

    # Keyboard navigation
    orientation: Orientation = Orientation.LTR

    # Nested traversal guards
    cycle_policy: CyclePolicy = CyclePolicy.RAISE
    max_depth: Optional[int] = None

    # Rendering
    defer_until_painted: bool = True

    @classmethod
    def flat(cls, level_accessor: Callable[[Any], int], **kwargs) -> 'TreeConfig':
        """Create config for pre-flattened data carrying its own level.

        Args:
            level_accessor: Returns the 0-indexed level of a node
            **kwargs: Any other TreeConfig field

        Returns:
            TreeConfig using a level accessor
        """
        return cls(level_accessor=level_accessor, **kwargs)

    @classmethod
    def nested(cls, children_accessor: Callable[[Any], Any], **kwargs) -> 'TreeConfig':
        """Create config for recursively nested data.

        Args:
            children_accessor: Returns children of a node. May return a list,
                an awaitable, a push stream or an async iterable.
            **kwargs: Any other TreeConfig field

        Returns:
            TreeConfig using a children accessor
        """
        return cls(children_accessor=children_accessor, **kwargs)

    def node_source_count(self) -> int:
        """Count how many node discovery strategies are configured."""
        return sum(
            1 for source in (self.tree_control, self.level_accessor, self.children_accessor)
            if source is not None
        )

    def validate(self) -> List[str]:
        """Validate configuration values.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if self.max_depth is not None and self.max_depth < 0:
            errors.append("max_depth cannot be negative")

        if not isinstance(self.orientation, Orientation):
            errors.append("orientation must be an Orientation")

        if not isinstance(self.cycle_policy, CyclePolicy):
            errors.append("cycle_policy must be a CyclePolicy")

        for name in ('level_accessor', 'children_accessor', 'expansion_key', 'track_by'):
            value = getattr(self, name)
            if value is not None and not callable(value):
                errors.append(f"{name} must be callable")

        return errors
