"""Exception types raised by the templates and broker clients."""

from typing import Optional


class TemplateError(Exception):
    """Base class for kafka_template errors."""


class DeliveryFailure(TemplateError):
    """A send to the broker did not settle successfully."""

    def __init__(self, message: str, destination: Optional[str] = None) -> None:
        super().__init__(message)
        self.destination = destination


class ConfigurationError(TemplateError):
    """Settings are missing, malformed, or name an unknown backend."""
