"""Small observable-cell toolkit for publishing session state."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], None]


class Cell(Generic[T]):
    """Holds a value and notifies subscribers when it changes."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._subscribers: list[Subscriber] = []
        self._lock = threading.RLock()

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        with self._lock:
            if value == self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("Cell subscriber failed")

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def readonly(self) -> "ReadOnlyCell[T]":
        return ReadOnlyCell(self)


class ReadOnlyCell(Generic[T]):
    def __init__(self, cell: "Cell[T] | Derived[T]") -> None:
        self._cell = cell

    def get(self) -> T:
        return self._cell.get()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self._cell.subscribe(callback)


class Derived(Generic[T]):
    """Value computed from other cells, recomputed whenever a source changes."""

    def __init__(self, compute: Callable[[], T], sources: Sequence[object]) -> None:
        self._compute = compute
        self._cell: Cell[T] = Cell(compute())
        for source in sources:
            source.subscribe(self._on_source_changed)  # type: ignore[attr-defined]

    def get(self) -> T:
        return self._cell.get()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self._cell.subscribe(callback)

    def _on_source_changed(self, _value: object) -> None:
        self._cell.set(self._compute())
