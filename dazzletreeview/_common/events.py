"""Minimal push streams.

The engine is push-based: expansion changes, data emissions and key
manager item lists are all delivered to subscribers as they happen.
These classes cover exactly what the engine needs and nothing more.
"""

from typing import Any, Callable, Generic, List, Optional, TypeVar

T = TypeVar('T')


class Subscription:
    """Handle returned by ``EventStream.subscribe``."""

    def __init__(self, stream: 'EventStream', observer: '_Observer'):
        self._stream = stream
        self._observer = observer

    @property
    def closed(self) -> bool:
        return self._observer not in self._stream._observers

    def unsubscribe(self) -> None:
        if self._observer in self._stream._observers:
            self._stream._observers.remove(self._observer)


class _Observer:
    __slots__ = ('on_next', 'on_error', 'on_complete')

    def __init__(self, on_next, on_error=None, on_complete=None):
        self.on_next = on_next
        self.on_error = on_error
        self.on_complete = on_complete


class EventStream(Generic[T]):
    """Multicast stream of values.

    Subscribers are called synchronously, in subscription order, from
    ``emit``. A completed stream ignores further emissions.
    """

    def __init__(self):
        self._observers: List[_Observer] = []
        self._completed = False
        self._error: Optional[BaseException] = None

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def subscribe(
        self,
        on_next: Callable[[T], Any],
        on_error: Optional[Callable[[BaseException], Any]] = None,
        on_complete: Optional[Callable[[], Any]] = None,
    ) -> Subscription:
        """Register callbacks for values, errors and completion.

        Args:
            on_next: Called with every emitted value
            on_error: Called once if the stream fails
            on_complete: Called once when the stream completes

        Returns:
            Subscription that can be used to stop receiving values
        """
        observer = _Observer(on_next, on_error, on_complete)
        if self._error is not None:
            if on_error is not None:
                on_error(self._error)
            return Subscription(self, observer)
        if self._completed:
            if on_complete is not None:
                on_complete()
            return Subscription(self, observer)
        self._observers.append(observer)
        return Subscription(self, observer)

    def emit(self, value: T) -> None:
        if self._completed:
            return
        # Copy so observers may unsubscribe while being notified
        for observer in list(self._observers):
            observer.on_next(value)

    def error(self, exc: BaseException) -> None:
        """Fail the stream; observers without an error handler get nothing."""
        if self._completed:
            return
        self._completed = True
        self._error = exc
        observers, self._observers = self._observers, []
        for observer in observers:
            if observer.on_error is not None:
                observer.on_error(exc)

    def complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        observers, self._observers = self._observers, []
        for observer in observers:
            if observer.on_complete is not None:
                observer.on_complete()


class BehaviorStream(EventStream[T]):
    """Stream that remembers its latest value and replays it on subscribe."""

    def __init__(self, value: T):
        super().__init__()
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, on_next, on_error=None, on_complete=None) -> Subscription:
        subscription = super().subscribe(on_next, on_error, on_complete)
        if not subscription.closed:
            on_next(self._value)
        return subscription

    def emit(self, value: T) -> None:
        if self._completed:
            return
        self._value = value
        super().emit(value)
