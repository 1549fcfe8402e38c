"""Settings from the environment (and .env), plus factories for the composition root."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from kafka_template.broker import BrokerClient, InMemoryBrokerClient
from kafka_template.errors import ConfigurationError

BACKEND_MEMORY = "memory"
BACKEND_KAFKA = "kafka"
BACKENDS = (BACKEND_MEMORY, BACKEND_KAFKA)

# env var -> settings field
_ENV_FIELDS = {
    "BROKER_BACKEND": "backend",
    "KAFKA_BOOTSTRAP_SERVERS": "bootstrap_servers",
    "KAFKA_CLIENT_ID": "client_id",
    "KAFKA_GROUP_ID": "group_id",
    "PUBLISHER_MAX_WORKERS": "publisher_max_workers",
    "LOG_LEVEL": "log_level",
}


class BrokerSettings(BaseModel):
    """Opaque broker configuration; the templates never read it themselves."""

    backend: str = BACKEND_MEMORY
    bootstrap_servers: str = "localhost:9092"
    client_id: str = "kafka-template"
    group_id: str = "kafka-template"
    publisher_max_workers: int = Field(default=4, ge=1)
    log_level: str = "INFO"

    @field_validator("backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in BACKENDS:
            raise ValueError(f"unknown broker backend {value!r}, expected one of {BACKENDS}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.strip().upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> BrokerSettings:
    """Build settings from ``env``; defaults to os.environ after loading .env."""
    if env is None:
        load_dotenv()
        env = os.environ
    values = {
        field: env[var].strip()
        for var, field in _ENV_FIELDS.items()
        if (env.get(var) or "").strip()
    }
    try:
        return BrokerSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def build_client(settings: BrokerSettings) -> BrokerClient:
    """Return the broker client selected by ``settings.backend``."""
    if settings.backend == BACKEND_KAFKA:
        from kafka_template.kafka import KafkaBrokerClient

        return KafkaBrokerClient(
            settings.bootstrap_servers,
            client_id=settings.client_id,
            group_id=settings.group_id,
        )
    return InMemoryBrokerClient()


def build_executor(settings: BrokerSettings) -> ThreadPoolExecutor:
    """Execution context for publisher sends."""
    return ThreadPoolExecutor(
        max_workers=settings.publisher_max_workers,
        thread_name_prefix="publisher",
    )
