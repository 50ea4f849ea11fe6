from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Generic, TypeVar


logger = logging.getLogger("speedometer.output.observable")

T = TypeVar("T")
Observer = Callable[[T], None]


class LatestValue(Generic[T]):
    """Holds the most recent value of a signal and pushes changes to observers.

    A new observer receives the current value immediately and then every
    later value; no backlog is kept. Deliveries are ordered: an observer never
    sees an older value after a newer one. Observer exceptions are logged and
    do not reach the publisher.
    """

    def __init__(self, name: str, initial: T) -> None:
        self.name = name
        self._value = initial
        self._lock = threading.Lock()
        # Held across "update + notify"; reentrant so observers may publish.
        self._delivery = threading.RLock()
        self._observers: Dict[int, Observer[T]] = {}
        self._next_id = 0

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    def publish(self, value: T) -> None:
        with self._delivery:
            with self._lock:
                self._value = value
                observers = list(self._observers.values())
            for obs in observers:
                self._notify(obs, value)

    def subscribe(self, observer: Observer[T]) -> Callable[[], None]:
        with self._delivery:
            with self._lock:
                key = self._next_id
                self._next_id += 1
                self._observers[key] = observer
                current = self._value
            self._notify(observer, current)

        def _unsubscribe() -> None:
            with self._lock:
                self._observers.pop(key, None)

        return _unsubscribe

    def _notify(self, observer: Observer[T], value: T) -> None:
        try:
            observer(value)
        except Exception:
            logger.exception("Observer of %s failed", self.name)
