"""Exceptions raised by DazzleTreeView.

Configuration problems are raised synchronously when a tree is built so
that a misconfigured tree fails fast. Operational problems (a children
accessor raising, a data stream erroring) travel through the engine's
error channel instead; see ``TreeView.errors`` and ``TreeView.flush()``.
"""


class TreeError(Exception):
    """Base class for all tree engine errors."""
    pass


class ConfigurationError(TreeError):
    """Raised when the tree's node source configuration is unusable."""

    @classmethod
    def missing_node_source(cls) -> 'ConfigurationError':
        return cls(
            "Could not find a tree control, level_accessor, or children_accessor "
            "for the tree."
        )

    @classmethod
    def multiple_node_sources(cls) -> 'ConfigurationError':
        return cls(
            "More than one of tree control, level_accessor, or children_accessor "
            "were provided."
        )


class MissingNodeTemplateError(TreeError):
    """Raised when no node definition matches a data item."""

    def __init__(self, message: str = "Could not find a matching node definition "
                                      "for the provided node data."):
        super().__init__(message)


class AmbiguousDefaultTemplateError(TreeError):
    """Raised when more than one node definition lacks a ``when`` predicate."""

    def __init__(self, message: str = "There can only be one default node "
                                      "definition without a when predicate function."):
        super().__init__(message)


class StructuralIntegrityError(TreeError):
    """Raised when a rendered node is not attached to any container chain."""

    def __init__(self, message: str = "Incorrect tree structure containing detached node."):
        super().__init__(message)


class InvalidDataSourceError(TreeError):
    """Raised when a data source is neither a sequence, a stream nor a DataSource."""

    def __init__(self, message: str = "A valid data source must be provided."):
        super().__init__(message)


class CyclicTreeError(TreeError):
    """Raised when a node appears more than once in nested children data or exceeds max_depth.

    A repeated node is either a loop back onto an ancestor or a node shared
    by two parents. Every node has exactly one parent and one position in
    the flattened list.
    """

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key
