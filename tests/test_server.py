import pytest
from fastapi.testclient import TestClient

from conftest import ImmediateExecutor

from kafka_template.broker import InMemoryBrokerClient
from kafka_template.config import BrokerSettings
from kafka_template.samples import SAMPLE_LISTEN_TOPIC, SAMPLE_TOPIC_ONE, SAMPLE_TOPIC_TWO
from server import create_app


@pytest.fixture
def broker():
    return InMemoryBrokerClient()


@pytest.fixture
def http(broker):
    app = create_app(BrokerSettings(), client=broker, executor=ImmediateExecutor())
    with TestClient(app) as client:
        yield client


def test_health(http):
    r = http.get("/api/v1/health")
    assert r.status_code == 200
    body = r.json()
    assert body["backend"] == "memory"
    assert body["publishers"] == 3
    assert body["subscribers"] == 1
    assert body["uptime_sec"] >= 0


def test_sample_destinations_are_distinct():
    assert len({SAMPLE_TOPIC_ONE, SAMPLE_TOPIC_TWO, SAMPLE_LISTEN_TOPIC}) == 3


def test_publish_is_accepted_and_sent(http, broker):
    r = http.post(f"/api/v1/publish/{SAMPLE_TOPIC_ONE}", json={"payload": {"id": 1}})
    assert r.status_code == 202
    assert r.json() == {"status": "accepted", "destination": SAMPLE_TOPIC_ONE}
    assert broker.messages_sent(SAMPLE_TOPIC_ONE) == 1


def test_publish_to_unknown_destination_is_404(http):
    r = http.post("/api/v1/publish/nowhere", json={"payload": {"id": 1}})
    assert r.status_code == 404
    assert r.json()["destination"] == "nowhere"


def test_publish_requires_object_payload(http):
    r = http.post(f"/api/v1/publish/{SAMPLE_TOPIC_ONE}", json={"payload": "text"})
    assert r.status_code == 422


def test_listener_round_trip_is_counted_in_stats(http):
    http.post(f"/api/v1/publish/{SAMPLE_LISTEN_TOPIC}", json={"payload": {"id": 1}})
    http.post(f"/api/v1/publish/{SAMPLE_LISTEN_TOPIC}", json={"payload": {"name": "no id"}})

    counters = http.get("/api/v1/stats").json()["counters"]
    assert counters[f"subscriber.{SAMPLE_LISTEN_TOPIC}.received"] == 2
    assert counters[f"subscriber.{SAMPLE_LISTEN_TOPIC}.processed"] == 1
    assert counters[f"subscriber.{SAMPLE_LISTEN_TOPIC}.rejected"] == 1
    assert counters[f"publisher.{SAMPLE_LISTEN_TOPIC}.delivered"] == 2


def test_failed_send_is_counted(http, broker):
    broker.fail_with(SAMPLE_TOPIC_TWO)
    r = http.post(f"/api/v1/publish/{SAMPLE_TOPIC_TWO}", json={"payload": {"id": 1}})
    assert r.status_code == 202
    counters = http.get("/api/v1/stats").json()["counters"]
    assert counters[f"publisher.{SAMPLE_TOPIC_TWO}.delivery_failed"] == 1


def test_alerting_failure_handler_logs_then_delegates(caplog):
    from kafka_template.errors import DeliveryFailure
    from kafka_template.samples import AlertingFailureHandler

    handler = AlertingFailureHandler()
    handler.handle_failure(DeliveryFailure("broker down"), {"id": 1}, SAMPLE_TOPIC_TWO)

    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["custom_failure_handling", "unhandled_failure"]
    assert all(r.destination == SAMPLE_TOPIC_TWO for r in caplog.records)
    assert caplog.records[1].payload == {"id": 1}
