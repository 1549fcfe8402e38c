"""Example: publisher and subscriber templates over the in-memory broker."""

import logging
from concurrent.futures import ThreadPoolExecutor

from kafka_template import CallbackHandler, InMemoryBrokerClient, PublisherTemplate, SubscriberTemplate
from kafka_template.observability import Metrics
from kafka_template.samples import (
    SAMPLE_LISTEN_TOPIC,
    SAMPLE_TOPIC_ONE,
    SAMPLE_TOPIC_TWO,
    AlertingFailureHandler,
    SampleListener,
)

logging.basicConfig(level=logging.INFO)


def main() -> None:
    client = InMemoryBrokerClient()
    client.fail_with(SAMPLE_TOPIC_ONE)
    metrics = Metrics()
    executor = ThreadPoolExecutor(max_workers=2)

    listener = SubscriberTemplate(SAMPLE_LISTEN_TOPIC, SampleListener(), metrics)
    listener.bind(client)
    printer = SubscriberTemplate(
        SAMPLE_TOPIC_TWO,
        CallbackHandler(process=lambda event: print("got", event)),
        metrics,
    )
    printer.bind(client)

    signups = PublisherTemplate(SAMPLE_LISTEN_TOPIC, client, executor, metrics=metrics)
    signups.publish({"id": 101, "event": "user.signup"})
    signups.publish({"event": "order.placed"})  # no id, rejected by SampleListener

    PublisherTemplate(SAMPLE_TOPIC_TWO, client, executor, metrics=metrics).publish({"id": 1})
    PublisherTemplate(
        SAMPLE_TOPIC_ONE, client, executor, AlertingFailureHandler(), metrics
    ).publish({"id": 2})

    executor.shutdown(wait=True)
    print(metrics.snapshot())
    client.close()


if __name__ == "__main__":
    main()
