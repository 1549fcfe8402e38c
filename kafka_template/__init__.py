"""Publish/subscribe templates over a pluggable broker client."""

from kafka_template.broker import BrokerClient, InMemoryBrokerClient
from kafka_template.errors import ConfigurationError, DeliveryFailure, TemplateError
from kafka_template.hooks import (
    CallbackHandler,
    FailureHandler,
    LoggingFailureHandler,
    MessageHandler,
)
from kafka_template.outcome import RecordMetadata, SendOutcome
from kafka_template.publisher import PublisherTemplate
from kafka_template.subscriber import SubscriberTemplate

__all__ = [
    "BrokerClient",
    "InMemoryBrokerClient",
    "TemplateError",
    "DeliveryFailure",
    "ConfigurationError",
    "MessageHandler",
    "CallbackHandler",
    "FailureHandler",
    "LoggingFailureHandler",
    "RecordMetadata",
    "SendOutcome",
    "PublisherTemplate",
    "SubscriberTemplate",
]
