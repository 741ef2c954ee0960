from __future__ import annotations

import asyncio
import queue
import threading
import weakref
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

from ..domain.errors import SubscriptionClosed

T = TypeVar("T")
U = TypeVar("U")

_CLOSED = object()


def _release(waiter: "asyncio.Future[None]") -> None:
    if not waiter.done():
        waiter.set_result(None)


class Subscription(Generic[T]):
    """Stream of values pushed by a :class:`LiveValue`.

    - Starts with the value current at subscription time.
    - Receives every later publish, in publish order.
    - ``close()`` unsubscribes and discards pending values; closing the
      owning :class:`LiveValue` ends the stream after the pending values.

    Readable synchronously (``get``, ``latest``, ``for`` loops) or from a
    coroutine with ``async for``.
    """

    def __init__(
        self, owner: "LiveValue[Any]", initial: T, select: Callable[[Any], T]
    ) -> None:
        self._owner = owner
        self._select = select
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._lock = threading.Lock()
        self._waiters: List[Tuple[asyncio.AbstractEventLoop, "asyncio.Future[None]"]] = []
        self._closed = False
        self._last: T = initial
        self._queue.put(initial)

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, value: object) -> None:
        with self._lock:
            if self._closed:
                return
            if value is _CLOSED:
                self._closed = True
            self._queue.put(value)
            waiters, self._waiters = self._waiters, []
        for loop, waiter in waiters:
            loop.call_soon_threadsafe(_release, waiter)

    def _take(self, item: object) -> T:
        if item is _CLOSED:
            # keep the marker so every later read also sees the close
            self._queue.put(_CLOSED)
            raise SubscriptionClosed("subscription is closed")
        self._last = item  # type: ignore[assignment]
        return self._last

    def get(self, timeout: Optional[float] = None) -> T:
        """Block until the next value arrives and return it."""
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no value published within {timeout} seconds") from None
        return self._take(item)

    def latest(self) -> T:
        """Drain pending values and return the newest one seen so far."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return self._last
            if item is _CLOSED:
                self._queue.put(_CLOSED)
                return self._last
            self._last = item  # type: ignore[assignment]

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self._owner._unsubscribe(self)
        with self._lock:
            while not self._queue.empty():
                self._queue.get_nowait()
            self._closed = True
            self._queue.put(_CLOSED)
            waiters, self._waiters = self._waiters, []
        for loop, waiter in waiters:
            loop.call_soon_threadsafe(_release, waiter)

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        loop = asyncio.get_running_loop()
        while True:
            try:
                return self._take(self._queue.get_nowait())
            except queue.Empty:
                pass
            except SubscriptionClosed:
                raise StopAsyncIteration from None

            waiter: "asyncio.Future[None]" = loop.create_future()
            with self._lock:
                if self._queue.empty():
                    self._waiters.append((loop, waiter))
                else:
                    waiter.set_result(None)
            try:
                await waiter
            finally:
                with self._lock:
                    if (loop, waiter) in self._waiters:
                        self._waiters.remove((loop, waiter))

    def __enter__(self) -> "Subscription[T]":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class LiveValue(Generic[T]):
    """Holds a value and pushes every update to its subscribers.

    Publishing is serialized, so all subscribers observe updates in the same
    order they were published. Subscribers are held weakly: a subscription the
    caller drops without ``close()`` stops receiving values once collected.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._subscribers: "weakref.WeakSet[Subscription[Any]]" = weakref.WeakSet()
        self._lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            for sub in list(self._subscribers):
                sub._push(sub._select(value))

    def subscribe(self) -> Subscription[T]:
        return self.subscribe_map(lambda value: value)

    def subscribe_map(self, select: Callable[[T], U]) -> Subscription[U]:
        """Subscribe to ``select(value)`` instead of the value itself."""
        with self._lock:
            sub: Subscription[U] = Subscription(self, select(self._value), select)
            self._subscribers.add(sub)
            return sub

    def _unsubscribe(self, sub: Subscription[Any]) -> None:
        with self._lock:
            self._subscribers.discard(sub)

    def close(self) -> None:
        """Close every open subscription."""
        with self._lock:
            subs = list(self._subscribers)
            self._subscribers = weakref.WeakSet()
        for sub in subs:
            sub._push(_CLOSED)
