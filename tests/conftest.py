import threading
from concurrent.futures import Executor, Future

import pytest

from kafka_template.broker import BrokerClient
from kafka_template.hooks import FailureHandler, MessageHandler
from kafka_template.outcome import RecordMetadata, SendOutcome


class ImmediateExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class ManualBrokerClient(BrokerClient):
    """Broker stub whose send futures stay pending until the test settles them."""

    def __init__(self):
        self.sends = []
        self.subscriptions = {}
        self.sent = threading.Event()

    def send(self, destination, message):
        future = Future()
        future.set_running_or_notify_cancel()
        self.sends.append((destination, message, future))
        self.sent.set()
        return future

    def subscribe(self, destination, callback):
        self.subscriptions.setdefault(destination, []).append(callback)

    def succeed(self, index=0, partition=0, offset=0):
        destination, _, future = self.sends[index]
        future.set_result(SendOutcome.succeeded(RecordMetadata(destination, partition, offset)))

    def fail(self, cause, index=0):
        self.sends[index][2].set_result(SendOutcome.failed(cause))


class RecordingHandler(MessageHandler):
    def __init__(self, validate=None, fail_with=None):
        self.processed = []
        self._validate = validate
        self._fail_with = fail_with

    def validate(self, event):
        if self._validate is None:
            return True
        return self._validate(event)

    def process(self, event):
        if self._fail_with is not None:
            raise self._fail_with
        self.processed.append(event)


class RecordingFailureHandler(FailureHandler):
    def __init__(self):
        self.failures = []
        self.called = threading.Event()

    def handle_failure(self, cause, message, destination):
        self.failures.append((cause, message, destination))
        self.called.set()


@pytest.fixture
def executor():
    return ImmediateExecutor()


@pytest.fixture
def broker():
    return ManualBrokerClient()


@pytest.fixture
def failure_handler():
    return RecordingFailureHandler()
