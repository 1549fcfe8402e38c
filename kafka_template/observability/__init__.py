"""Observability: logging and metrics for publisher and subscriber templates."""

from kafka_template.observability.logger import get_logger
from kafka_template.observability.metrics import Metrics

__all__ = ["get_logger", "Metrics"]
