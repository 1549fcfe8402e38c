"""Broker client interface and an in-memory implementation (no external broker)."""

import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional

from kafka_template.errors import DeliveryFailure
from kafka_template.observability import get_logger
from kafka_template.outcome import RecordMetadata, SendOutcome

DeliveryCallback = Callable[[Any], None]


class BrokerClient(ABC):
    """What the templates need from a messaging backend."""

    @abstractmethod
    def send(self, destination: str, message: Any) -> "Future[SendOutcome]":
        """Start an asynchronous send. Must not block on the network."""
        pass

    @abstractmethod
    def subscribe(self, destination: str, callback: DeliveryCallback) -> None:
        """Call ``callback(event)`` once per inbound message on ``destination``."""
        pass

    def close(self) -> None:
        """Release connections and background threads."""


class InMemoryBrokerClient(BrokerClient):
    """Process-local broker: one partition per destination, delivery on the sending thread."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[DeliveryCallback]] = {}
        self._offsets: Dict[str, int] = {}
        self._failures: Dict[str, BaseException] = {}
        self._lock = threading.Lock()
        self._logger = get_logger("kafka_template.broker.memory")

    def subscribe(self, destination: str, callback: DeliveryCallback) -> None:
        with self._lock:
            self._subscribers.setdefault(destination, []).append(callback)
        self._logger.info("subscribed", extra={"destination": destination})

    def fail_with(self, destination: str, cause: Optional[BaseException] = None) -> None:
        """Make every later send to ``destination`` settle with ``cause``."""
        with self._lock:
            self._failures[destination] = cause or DeliveryFailure(
                f"broker unavailable for {destination!r}", destination
            )

    def recover(self, destination: str) -> None:
        """Undo fail_with for ``destination``."""
        with self._lock:
            self._failures.pop(destination, None)

    def messages_sent(self, destination: str) -> int:
        """Number of messages stored on ``destination`` (next offset)."""
        with self._lock:
            return self._offsets.get(destination, 0)

    def send(self, destination: str, message: Any) -> "Future[SendOutcome]":
        future: Future = Future()
        future.set_running_or_notify_cancel()
        with self._lock:
            cause = self._failures.get(destination)
            if cause is None:
                offset = self._offsets.get(destination, 0)
                self._offsets[destination] = offset + 1
            callbacks = list(self._subscribers.get(destination, []))
        if cause is not None:
            future.set_result(SendOutcome.failed(cause))
            return future
        self._deliver(destination, message, callbacks)
        future.set_result(
            SendOutcome.succeeded(RecordMetadata(destination, 0, offset))
        )
        return future

    def _deliver(self, destination: str, message: Any, callbacks: List[DeliveryCallback]) -> None:
        """Call every subscriber; one failing subscriber does not stop the rest."""
        for callback in callbacks:
            try:
                callback(message)
            except Exception as e:
                self._logger.exception(
                    "delivery_failed",
                    extra={"destination": destination, "error": str(e)},
                )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destinations={len(self._offsets)})"
