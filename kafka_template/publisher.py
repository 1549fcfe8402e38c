"""Publisher template: fire-and-forget sends to one destination."""

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from kafka_template.config import build_executor, load_settings
from kafka_template.hooks import FailureHandler, LoggingFailureHandler
from kafka_template.observability import get_logger

if TYPE_CHECKING:
    from kafka_template.broker import BrokerClient
    from kafka_template.observability import Metrics
    from kafka_template.outcome import SendOutcome

T = TypeVar("T")

_default_executor: Optional[ThreadPoolExecutor] = None
_default_executor_lock = threading.Lock()


def default_executor() -> ThreadPoolExecutor:
    """Return the process-wide send pool, sized from settings on first use."""
    global _default_executor
    with _default_executor_lock:
        if _default_executor is None:
            _default_executor = build_executor(load_settings())
        return _default_executor


class PublisherTemplate(Generic[T]):
    """Bound publish capability for one destination.

    ``publish`` hands the send to ``executor`` and returns at once. The send
    registers one completion callback on the broker's future: success is logged
    with its delivery metadata, failure goes to ``failure_handler`` exactly once.
    Nothing is retried.
    """

    def __init__(
        self,
        destination: str,
        client: "BrokerClient",
        executor: Optional[Executor] = None,
        failure_handler: Optional[FailureHandler[T]] = None,
        metrics: Optional["Metrics"] = None,
    ) -> None:
        self._destination = destination
        self._client = client
        self._executor = executor if executor is not None else default_executor()
        self._failure_handler: FailureHandler[T] = failure_handler or LoggingFailureHandler()
        self._metrics = metrics
        self._logger = get_logger(f"kafka_template.publisher.{destination}")

    @property
    def destination(self) -> str:
        return self._destination

    def publish(self, message: T) -> None:
        """Schedule a send of ``message``; delivery has not happened when this returns.

        An executor that no longer accepts work counts as a failed send and
        goes to the failure hook instead of raising here.
        """
        try:
            task = self._executor.submit(self._send_message, message)
        except RuntimeError as e:
            self._on_failure(e, message)
            return
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._logger.error(
                "send_task_failed",
                exc_info=error,
                extra={"destination": self._destination, "error": str(error)},
            )

    def _send_message(self, message: T) -> None:
        self._logger.warning(
            "triggering_event",
            extra={"destination": self._destination, "payload": message},
        )
        self._count("published")
        try:
            future = self._client.send(self._destination, message)
        except Exception as e:
            self._on_failure(e, message)
            return
        future.add_done_callback(lambda f: self._on_complete(f, message))

    def _on_complete(self, future: "Future[SendOutcome]", message: T) -> None:
        try:
            outcome = future.result()
        except Exception as e:
            self._on_failure(e, message)
            return
        if not outcome.success:
            self._on_failure(outcome.cause, message)
            return
        metadata = outcome.metadata
        self._count("delivered")
        self._logger.debug(
            "event_triggered",
            extra={
                "destination": metadata.destination,
                "partition": metadata.partition,
                "offset": metadata.offset,
                "payload": message,
            },
        )

    def _on_failure(self, cause: BaseException, message: T) -> None:
        self._count("delivery_failed")
        self._logger.error(
            "event_trigger_failed",
            extra={
                "destination": self._destination,
                "payload": message,
                "error": str(cause),
            },
        )
        self._failure_handler.handle_failure(cause, message, self._destination)

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.increment(f"publisher.{self._destination}.{name}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destination={self._destination!r})"
