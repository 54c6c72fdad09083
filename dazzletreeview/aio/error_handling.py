"""
Error handling wrapper for children accessors.

``ErrorHandlingChildrenAccessor`` wraps a children accessor and hands
every failure to a pluggable policy, so one broken subtree does not have
to fail the whole layout::

    policy = ContinueOnErrorsPolicy()
    config = TreeConfig.nested(ErrorHandlingChildrenAccessor(load_children, policy))
"""

import inspect
from typing import Any, Callable, Optional

from .core.traverser import resolve_children
from .error_policies import ErrorPolicy, FailFastPolicy


class ErrorHandlingChildrenAccessor:
    """
    Callable that wraps a children accessor with an error policy.

    Synchronous failures go to ``policy.handle_sync``; failures while
    awaiting an async result go to ``policy.handle``.

    Args:
        children_of: The accessor to wrap
        policy: Error handling policy (defaults to FailFastPolicy)
    """

    method_name = 'get_children'

    def __init__(self, children_of: Callable[[Any], Any], policy: Optional[ErrorPolicy] = None):
        self._children_of = children_of
        self._policy = policy or FailFastPolicy()

    def __call__(self, node: Any) -> Any:
        try:
            result = self._children_of(node)
        except Exception as e:
            return self._policy.handle_sync(e, self.method_name, node)

        if inspect.isawaitable(result) or hasattr(result, '__aiter__') or hasattr(result, 'subscribe'):
            return self._guard(result, node)
        return result

    async def _guard(self, result: Any, node: Any) -> Any:
        try:
            return await resolve_children(result)
        except Exception as e:
            return await self._policy.handle(e, self.method_name, node)

    def get_policy(self) -> ErrorPolicy:
        return self._policy

    def set_policy(self, policy: ErrorPolicy) -> None:
        self._policy = policy
