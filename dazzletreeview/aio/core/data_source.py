"""Data source abstraction.

A tree accepts its root data in several shapes:

- a plain sequence, rendered once
- a push stream exposing ``subscribe(on_next, on_error)``
- an async iterable, pumped by a background task
- a ``DataSource`` with ``connect(viewer)`` / ``disconnect(viewer)``,
  whose ``connect`` returns any of the shapes above

``DataSourceAdapter`` normalizes all of them into ``on_data(list)`` calls
and makes sure only the most recently attached source is listened to.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Sequence

from ..._common.events import BehaviorStream
from ...errors import InvalidDataSourceError

logger = logging.getLogger(__name__)


class DataSource(ABC):
    """Pull-style resource that yields a stream of root node lists."""

    @abstractmethod
    def connect(self, viewer: Any) -> Any:
        """Start providing data to ``viewer``.

        Returns:
            A sequence, push stream or async iterable of node lists
        """
        pass

    @abstractmethod
    def disconnect(self, viewer: Any) -> None:
        """Release everything acquired by ``connect``."""
        pass


class ArrayDataSource(DataSource):
    """In-memory data source; assigning ``data`` pushes a new list."""

    def __init__(self, data: Sequence[Any] = ()):
        self._stream: BehaviorStream[List[Any]] = BehaviorStream(list(data))
        self.connected = 0

    @property
    def data(self) -> List[Any]:
        return self._stream.value

    @data.setter
    def data(self, value: Sequence[Any]) -> None:
        self._stream.emit(list(value))

    def connect(self, viewer: Any) -> BehaviorStream:
        self.connected += 1
        return self._stream

    def disconnect(self, viewer: Any) -> None:
        self.connected -= 1


def is_data_source(value: Any) -> bool:
    """Duck-typed check for the connect/disconnect protocol."""
    if isinstance(value, DataSource):
        return True
    return callable(getattr(value, 'connect', None)) and callable(getattr(value, 'disconnect', None))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


class DataSourceAdapter:
    """Listens to exactly one data source at a time.

    Args:
        on_data: Called with a list of root nodes on every emission
        on_error: Called when the source fails
    """

    def __init__(self, on_data: Callable[[List[Any]], Any], on_error: Callable[[BaseException], Any]):
        self._on_data = on_data
        self._on_error = on_error
        self._source: Any = None
        self._viewer: Any = None
        self._subscription = None
        self._pump: Optional[asyncio.Task] = None
        self._token = 0

    @property
    def source(self) -> Any:
        return self._source

    def switch(self, source: Any, viewer: Any = None) -> None:
        """Detach the current source and attach ``source``.

        ``None`` detaches and emits an empty list so the view clears.

        Raises:
            InvalidDataSourceError: if ``source`` has an unsupported shape
        """
        if source is not None and not self.supports(source):
            raise InvalidDataSourceError()

        self._detach()
        self._source = source
        self._viewer = viewer

        if source is None:
            self._on_data([])
            return

        stream = source
        if is_data_source(source):
            logger.debug("Connecting data source %r", source)
            stream = source.connect(viewer)
            if not self._is_stream(stream):
                raise InvalidDataSourceError()
        self._attach(stream)

    def close(self) -> None:
        self._detach()
        self._source = None

    def supports(self, value: Any) -> bool:
        """Whether ``value`` is a shape this adapter can attach."""
        return is_data_source(value) or self._is_stream(value)

    @staticmethod
    def _is_stream(value: Any) -> bool:
        return (
            _is_sequence(value)
            or callable(getattr(value, 'subscribe', None))
            or hasattr(value, '__aiter__')
        )

    def _attach(self, stream: Any) -> None:
        token = self._token

        def deliver(nodes):
            # Late emissions from a replaced source are ignored
            if token == self._token:
                self._on_data(list(nodes) if nodes is not None else [])

        def fail(exc):
            if token == self._token:
                self._on_error(exc)

        if _is_sequence(stream):
            deliver(stream)
        elif callable(getattr(stream, 'subscribe', None)):
            self._subscription = stream.subscribe(deliver, fail)
        else:
            self._pump = asyncio.get_running_loop().create_task(self._run_pump(stream, deliver, fail))

    @staticmethod
    async def _run_pump(stream: Any, deliver: Callable, fail: Callable) -> None:
        try:
            async for nodes in stream:
                deliver(nodes)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            fail(exc)

    def _detach(self) -> None:
        self._token += 1
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._pump is not None:
            self._pump.cancel()
            self._pump = None
        if self._source is not None and is_data_source(self._source):
            logger.debug("Disconnecting data source %r", self._source)
            self._source.disconnect(self._viewer)
