"""Extension points passed into the templates at construction.

A subscriber gets a ``MessageHandler`` (``process`` required, ``validate``
optional); a publisher gets a ``FailureHandler`` for sends that do not settle
successfully.
"""

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

from kafka_template.observability import get_logger

T = TypeVar("T")


class MessageHandler(ABC, Generic[T]):
    """Validation and processing hooks for inbound events."""

    @abstractmethod
    def process(self, event: T) -> None:
        """Handle a validated event. Must be implemented by subclasses."""
        pass

    def validate(self, event: T) -> bool:
        """Return False to drop the event before processing. Accepts everything by default."""
        return True


class CallbackHandler(MessageHandler[T]):
    """MessageHandler built from plain functions instead of a subclass."""

    def __init__(
        self,
        process: Callable[[T], None],
        validate: Optional[Callable[[T], bool]] = None,
    ) -> None:
        self._process_fn = process
        self._validate_fn = validate

    def process(self, event: T) -> None:
        self._process_fn(event)

    def validate(self, event: T) -> bool:
        if self._validate_fn is None:
            return True
        return bool(self._validate_fn(event))


class FailureHandler(ABC, Generic[T]):
    """Called once per send that failed to settle successfully."""

    @abstractmethod
    def handle_failure(self, cause: BaseException, message: T, destination: str) -> None:
        pass


class LoggingFailureHandler(FailureHandler[T]):
    """Default failure hook: log at error severity and drop the message."""

    def __init__(self) -> None:
        self._logger = get_logger("kafka_template.failure")

    def handle_failure(self, cause: BaseException, message: T, destination: str) -> None:
        self._logger.error(
            "unhandled_failure",
            extra={
                "destination": destination,
                "payload": message,
                "error": str(cause),
            },
        )
