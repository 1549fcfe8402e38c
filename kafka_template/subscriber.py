"""Subscriber template: validate-then-process with per-message fault isolation."""

from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from kafka_template.observability import get_logger

if TYPE_CHECKING:
    from kafka_template.broker import BrokerClient
    from kafka_template.hooks import MessageHandler
    from kafka_template.observability import Metrics

T = TypeVar("T")


class SubscriberTemplate(Generic[T]):
    """Bound receive capability for one destination. Holds no per-message state."""

    def __init__(
        self,
        destination: str,
        handler: "MessageHandler[T]",
        metrics: Optional["Metrics"] = None,
    ) -> None:
        self._destination = destination
        self._handler = handler
        self._metrics = metrics
        self._logger = get_logger(f"kafka_template.subscriber.{destination}")

    @property
    def destination(self) -> str:
        return self._destination

    def bind(self, client: "BrokerClient") -> None:
        """Register on_message with the client's delivery mechanism for this destination."""
        client.subscribe(self._destination, self.on_message)

    def on_message(self, event: T) -> None:
        """Entry point for the broker client, called once per delivered event.

        Invalid events are dropped with a warning. Any exception from validate
        or process is logged and swallowed so the delivery thread keeps going.
        """
        self._logger.warning(
            "received_event",
            extra={"destination": self._destination, "payload": event},
        )
        self._count("received")
        try:
            if not self._handler.validate(event):
                self._logger.warning(
                    "event_failed_validation",
                    extra={"destination": self._destination, "payload": event},
                )
                self._count("rejected")
                return
            self._logger.debug(
                "processing_event",
                extra={"destination": self._destination, "payload": event},
            )
            self._handler.process(event)
            self._count("processed")
        except Exception as e:
            # TODO: hand the event to a redelivery hook once one exists
            self._logger.exception(
                "event_processing_failed",
                extra={
                    "destination": self._destination,
                    "payload": event,
                    "error": str(e),
                },
            )
            self._count("faulted")

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.increment(f"subscriber.{self._destination}.{name}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destination={self._destination!r})"
