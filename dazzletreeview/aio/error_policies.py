"""
Error handling policies for DazzleTreeView.

This module provides a flexible error handling system through the Policy
pattern, allowing users to decide what happens when a children accessor
fails while the tree is being laid out. Without a policy the error
propagates and the computation fails.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _default_for(method_name: str) -> Any:
    """Value that lets the layout continue after ``method_name`` failed."""
    if method_name == 'get_children':
        return []
    return None


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses implement different strategies for handling errors raised
    by user callbacks (mostly the children accessor) during layout.
    """

    @abstractmethod
    def handle_sync(self, error: Exception, method_name: str, node: Any) -> Any:
        """
        Handle an error raised synchronously.

        Args:
            error: The exception that was raised
            method_name: Name of the failed callback (e.g., 'get_children')
            node: The data node being processed when the error occurred

        Returns:
            A sensible default value that allows layout to continue,
            or re-raises the exception to stop it.
        """
        pass

    async def handle(self, error: Exception, method_name: str, node: Any) -> Any:
        """Handle an error raised while awaiting an async callback."""
        return self.handle_sync(error, method_name, node)


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error.

    This is the default behavior. Useful when partial trees are not
    acceptable.
    """

    def handle_sync(self, error: Exception, method_name: str, node: Any) -> Any:
        raise error


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that silently collects errors and continues.

    Failed nodes are treated as leaves. Useful for presenting all
    problems at the end.
    """

    def __init__(self):
        self.errors: List[Dict[str, Any]] = []

    def handle_sync(self, error: Exception, method_name: str, node: Any) -> Any:
        self.errors.append({
            'node': node,
            'method': method_name,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        })
        return _default_for(method_name)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts by type and the full records
        """
        by_type: Dict[str, int] = {}
        for record in self.errors:
            by_type[record['error_type']] = by_type.get(record['error_type'], 0) + 1
        return {
            'total_errors': len(self.errors),
            'by_type': by_type,
            'errors': self.errors,
        }


class ContinueOnErrorsPolicy(CollectErrorsPolicy):
    """
    Policy that collects errors, logs them and continues.

    Args:
        verbose: If True, log a warning for every error
    """

    def __init__(self, verbose: bool = True):
        super().__init__()
        self.verbose = verbose

    def handle_sync(self, error: Exception, method_name: str, node: Any) -> Any:
        result = super().handle_sync(error, method_name, node)
        if self.verbose:
            logger.warning("Error in %s for %r: %s", method_name, node, error)
        return result


class ThresholdPolicy(ErrorPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails.

    Args:
        max_errors: Maximum errors to tolerate before failing
        verbose: If True, log a warning for every tolerated error
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        self.max_errors = max_errors
        self.error_count = 0
        self.verbose = verbose
        self.errors: List[Exception] = []

    def handle_sync(self, error: Exception, method_name: str, node: Any) -> Any:
        self.error_count += 1
        self.errors.append(error)

        if self.error_count > self.max_errors:
            raise RuntimeError(f"Error threshold exceeded ({self.max_errors} errors)") from error

        if self.verbose:
            logger.warning(
                "[%d/%d] Error in %s for %r: %s",
                self.error_count, self.max_errors, method_name, node, error,
            )
        return _default_for(method_name)
