"""View bridge.

The engine never touches a real view. It tells a ``ViewRenderer`` what to
insert, remove, move or update, and keeps a ``ViewContainer`` mirror of
the node handles living in each container so it can answer questions
about them afterwards.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, List


class ViewRenderer(ABC):
    """Host-side view materialization.

    ``container`` is the engine's ``ViewContainer`` the change applies to:
    the tree's own container or the children container of a nested node.
    """

    @abstractmethod
    def insert(self, container: Any, template: Any, node: Any, index: int) -> None:
        """Render ``node`` from ``template`` at ``index`` of ``container``."""
        pass

    @abstractmethod
    def remove(self, container: Any, index: int) -> None:
        pass

    @abstractmethod
    def move(self, container: Any, previous_index: int, current_index: int) -> None:
        pass

    def update(self, node: Any, data: Any) -> None:
        """Refresh ``node`` after its data object was replaced."""
        pass


class ViewContainer:
    """Ordered mirror of the node handles rendered into one container.

    Args:
        owner: The tree for the top-level container, else the nested node
            owning it
    """

    def __init__(self, owner: Any):
        self.owner = owner
        self.nodes: List[Any] = []

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(list(self.nodes))

    def get(self, index: int) -> Any:
        return self.nodes[index]

    def index_of(self, node: Any) -> int:
        for index, candidate in enumerate(self.nodes):
            if candidate is node:
                return index
        return -1

    def insert(self, node: Any, index: int) -> None:
        self.nodes.insert(index, node)

    def remove(self, index: int) -> Any:
        node = self.nodes.pop(index)
        node.destroy()
        return node

    def move(self, previous_index: int, current_index: int) -> None:
        node = self.nodes.pop(previous_index)
        self.nodes.insert(current_index, node)

    def clear(self) -> None:
        while self.nodes:
            self.remove(len(self.nodes) - 1)

    @property
    def data(self) -> List[Any]:
        return [node.data for node in self.nodes]


class PaintGate:
    """Holds view work back until the host reports its first paint.

    Work submitted before ``mark_painted`` is queued and replayed in
    submission order; afterwards it runs immediately.
    """

    def __init__(self, enabled: bool = True):
        self.painted = not enabled
        self._queue: Deque[Callable[[], Any]] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run(self, work: Callable[[], Any]) -> None:
        if self.painted:
            work()
        else:
            self._queue.append(work)

    def mark_painted(self) -> None:
        """Replay queued work in order.

        Every queued item runs even if an earlier one fails; the first
        failure is re-raised once the queue is empty.
        """
        if self.painted:
            return
        self.painted = True
        first_error = None
        while self._queue:
            work = self._queue.popleft()
            try:
                work()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
