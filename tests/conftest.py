"""Test configuration and fixtures."""

import threading
import time

import pytest
from loguru import logger

from switchboard.bus.events import Message
from switchboard.bus.queue import MessageBus
from switchboard.bus.subscriber import Subscriber
from switchboard.config.schema import DispatcherConfig


class RecordingSubscriber(Subscriber):
    """Subscriber that records every callback, with optional hooks."""

    def __init__(self, name="recorder", on_deliver=None, on_shutdown=None):
        self.name = name
        self.on_deliver = on_deliver
        self.on_shutdown = on_shutdown
        self.received: list[Message] = []
        self.shutdowns = 0
        self.threads: set[str] = set()

    def deliver(self, message):
        self.received.append(message)
        self.threads.add(threading.current_thread().name)
        if self.on_deliver:
            self.on_deliver(self, message)

    def shutdown(self):
        self.shutdowns += 1
        if self.on_shutdown:
            self.on_shutdown(self)

    def __repr__(self):
        return f"RecordingSubscriber({self.name!r})"


@pytest.fixture
def make_subscriber():
    """Factory for RecordingSubscriber instances."""
    return RecordingSubscriber


@pytest.fixture
def wait_until():
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate, timeout=2.0, interval=0.002):
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() >= deadline:
                return False
            time.sleep(interval)
        return True

    return _wait


@pytest.fixture
def dispatcher_config() -> DispatcherConfig:
    """Fast-polling dispatcher settings for tests."""
    return DispatcherConfig(poll_interval_s=0.001, thread_name="test-dispatcher")


@pytest.fixture
def bus(dispatcher_config):
    """A running MessageBus that is always shut down on teardown."""
    message_bus = MessageBus(dispatcher_config)
    yield message_bus

    if message_bus.is_running:
        for entry in message_bus.subscribers():
            message_bus.unregister_everywhere(entry.subscriber)
        message_bus.terminate(object())
        message_bus.wait_stopped(timeout=2.0)


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
