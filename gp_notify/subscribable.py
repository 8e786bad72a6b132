"""Listener fan-out shared by the notification store and the tracker."""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, TypeVar

from gp_common.errors import ListenerError, error_to_payload

logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S], None]
Unsubscribe = Callable[[], None]


class SubscribableStore(ABC, Generic[S]):
    """Deliver the latest snapshot to every registered listener.

    Listeners are keyed by a token handed out at subscription time, so
    removal is a single keyed deletion and repeated removal is harmless.
    Subclasses mutate their state under ``self._lock`` and call
    :meth:`notify` once the mutation is complete.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._listeners: Dict[int, Listener[S]] = {}
        self._tokens = itertools.count(1)

    @abstractmethod
    def snapshot(self) -> S:
        """Return the value handed to listeners."""

    def subscribe(self, listener: Listener[S]) -> Unsubscribe:
        with self._lock:
            token = next(self._tokens)
            self._listeners[token] = listener

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self) -> None:
        with self._lock:
            for token, listener in list(self._listeners.items()):
                # an earlier listener may have unsubscribed this one
                if token not in self._listeners:
                    continue
                try:
                    listener(self.snapshot())
                except Exception as exc:
                    error = ListenerError(
                        "Listener raised during notification",
                        context={
                            "store": type(self).__name__,
                            "listener": getattr(listener, "__qualname__", repr(listener)),
                        },
                        cause=exc,
                    )
                    logger.error(
                        "Listener failed: %s", error_to_payload(error), exc_info=exc
                    )
