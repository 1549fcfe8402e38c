"""Sample handlers and destinations wired up by server.py and example.py."""

from typing import Any, Dict

from kafka_template.hooks import LoggingFailureHandler, MessageHandler
from kafka_template.observability import get_logger

SAMPLE_TOPIC_ONE = "sample.topic.1"
SAMPLE_TOPIC_TWO = "sample.topic.2"
SAMPLE_LISTEN_TOPIC = "sample.topic.to.listen.on"

REQUIRED_FIELD = "id"


class SampleListener(MessageHandler[Dict[str, Any]]):
    """Accepts dict events that carry an ``id``."""

    def __init__(self) -> None:
        self._logger = get_logger("kafka_template.samples.listener")

    def validate(self, event: Dict[str, Any]) -> bool:
        return isinstance(event, dict) and event.get(REQUIRED_FIELD) is not None

    def process(self, event: Dict[str, Any]) -> None:
        self._logger.info("message_processed", extra={"event_id": event[REQUIRED_FIELD]})


class AlertingFailureHandler(LoggingFailureHandler[Dict[str, Any]]):
    """Failure hook with its own alert line before the default logging."""

    def handle_failure(self, cause: BaseException, message: Dict[str, Any], destination: str) -> None:
        self._logger.error(
            "custom_failure_handling",
            extra={"destination": destination, "error": str(cause)},
        )
        super().handle_failure(cause, message, destination)
