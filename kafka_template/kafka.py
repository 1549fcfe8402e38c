"""Kafka broker client on confluent-kafka: JSON values, no keys."""

import json
import threading
from concurrent.futures import Future
from typing import Any, List, Optional

from confluent_kafka import Consumer, KafkaException, Producer

from kafka_template.broker import BrokerClient, DeliveryCallback
from kafka_template.errors import DeliveryFailure
from kafka_template.observability import get_logger
from kafka_template.outcome import RecordMetadata, SendOutcome

DEFAULT_POLL_INTERVAL_SEC = 0.1
DEFAULT_FLUSH_TIMEOUT_SEC = 10.0


def encode_value(message: Any) -> bytes:
    return json.dumps(message, default=str).encode("utf-8")


def decode_value(raw: Optional[bytes]) -> Any:
    if raw is None:
        raise ValueError("record has no value")
    return json.loads(raw.decode("utf-8"))


class KafkaBrokerClient(BrokerClient):
    """BrokerClient backed by a confluent_kafka Producer and one Consumer per subscription.

    A daemon thread polls the producer so delivery reports settle the send
    futures. Each subscribe() starts a daemon consumer thread that decodes
    records and hands them to the callback.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str = "kafka-template",
        group_id: str = "kafka-template",
        poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
    ) -> None:
        self._bootstrap_servers = bootstrap_servers
        self._group_id = group_id
        self._poll_interval = poll_interval
        self._producer = Producer(
            {"bootstrap.servers": bootstrap_servers, "client.id": client_id}
        )
        self._closed = threading.Event()
        self._consumer_threads: List[threading.Thread] = []
        self._logger = get_logger("kafka_template.broker.kafka")
        self._poll_thread = threading.Thread(
            target=self._poll_loop, name="kafka-producer-poll", daemon=True
        )
        self._poll_thread.start()

    def send(self, destination: str, message: Any) -> "Future[SendOutcome]":
        future: Future = Future()
        future.set_running_or_notify_cancel()

        def on_delivery(err, msg) -> None:
            if err is not None:
                future.set_result(
                    SendOutcome.failed(DeliveryFailure(str(err), destination))
                )
                return
            future.set_result(
                SendOutcome.succeeded(
                    RecordMetadata(msg.topic(), msg.partition(), msg.offset())
                )
            )

        try:
            self._producer.produce(
                destination, value=encode_value(message), on_delivery=on_delivery
            )
        except (BufferError, KafkaException) as e:
            future.set_result(SendOutcome.failed(DeliveryFailure(str(e), destination)))
        return future

    def subscribe(self, destination: str, callback: DeliveryCallback) -> None:
        consumer = Consumer(
            {
                "bootstrap.servers": self._bootstrap_servers,
                "group.id": self._group_id,
                "auto.offset.reset": "earliest",
            }
        )
        consumer.subscribe([destination])
        thread = threading.Thread(
            target=self._consume_loop,
            args=(consumer, destination, callback),
            name=f"kafka-consumer-{destination}",
            daemon=True,
        )
        self._consumer_threads.append(thread)
        thread.start()
        self._logger.info("subscribed", extra={"destination": destination})

    def close(self) -> None:
        """Stop consumers, flush pending sends, and stop the poll thread."""
        self._closed.set()
        for thread in self._consumer_threads:
            thread.join()
        remaining = self._producer.flush(DEFAULT_FLUSH_TIMEOUT_SEC)
        if remaining:
            self._logger.warning("unflushed_messages", extra={"count": remaining})
        self._poll_thread.join()

    def _poll_loop(self) -> None:
        while not self._closed.is_set():
            self._producer.poll(self._poll_interval)

    def _consume_loop(self, consumer: Consumer, destination: str, callback: DeliveryCallback) -> None:
        try:
            while not self._closed.is_set():
                record = consumer.poll(self._poll_interval)
                if record is None:
                    continue
                if record.error():
                    self._logger.warning(
                        "consumer_error",
                        extra={"destination": destination, "error": str(record.error())},
                    )
                    continue
                try:
                    event = decode_value(record.value())
                except (ValueError, UnicodeDecodeError) as e:
                    self._logger.error(
                        "undecodable_record",
                        extra={
                            "destination": destination,
                            "offset": record.offset(),
                            "error": str(e),
                        },
                    )
                    continue
                try:
                    callback(event)
                except Exception as e:
                    self._logger.exception(
                        "delivery_failed",
                        extra={"destination": destination, "error": str(e)},
                    )
        finally:
            consumer.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(bootstrap_servers={self._bootstrap_servers!r})"
