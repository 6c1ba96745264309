"""
Process-wide broadcast bus for snooping.

Every controller publishes the messages its own loggers emit. A snooping
controller subscribes and re-dispatches what it receives. Delivery is
synchronous, in subscription order, against a snapshot of the subscriber
table taken at publish time.

One bus per process (SnoopBus.instance()), or an explicit bus handed to
each controller when a test harness wants isolation.
"""

import itertools
import threading
from typing import Callable, Optional

from snooplogg.records import LogMessage

SnoopHandler = Callable[[LogMessage], None]


class SnoopBus:
    """Synchronous publish/subscribe channel for LogMessages."""

    _instance: Optional["SnoopBus"] = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._handlers: dict[int, SnoopHandler] = {}
        self._tokens = itertools.count(1)
        self._lock = threading.Lock()

    @classmethod
    def instance(cls) -> "SnoopBus":
        """Get or create the process-wide bus."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """
        Drop the process-wide bus. For test harnesses only; controllers
        already holding the old bus keep using it.
        """
        with cls._instance_lock:
            cls._instance = None

    def subscribe(self, handler: SnoopHandler) -> int:
        """Register a handler. Returns the token to unsubscribe with."""
        if not callable(handler):
            raise TypeError("Expected handler to be callable")
        with self._lock:
            token = next(self._tokens)
            self._handlers[token] = handler
        return token

    def unsubscribe(self, token: int) -> bool:
        """Remove a subscription. Returns True if it existed."""
        with self._lock:
            return self._handlers.pop(token, None) is not None

    def publish(self, msg: LogMessage) -> int:
        """Deliver to every current subscriber. Returns the delivery count."""
        with self._lock:
            handlers = list(self._handlers.values())
        for handler in handlers:
            handler(msg)
        return len(handlers)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)
