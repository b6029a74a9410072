"""Tests for the consumer process's signal handling."""

import signal

import pytest

from processor.consumer import ConsumerState
from processor.main import ConsumerProcess


class StubConsumer:
    def __init__(self, state):
        self.state = state
        self.stopped = False

    def stop(self):
        self.stopped = True


class TestShutdownSignal:
    def test_interrupts_blocking_take_when_waiting(self, settings):
        process = ConsumerProcess(settings)
        process._consumer = StubConsumer(ConsumerState.WAITING)
        with pytest.raises(KeyboardInterrupt):
            process._shutdown(signal.SIGTERM, None)
        assert process._consumer.stopped

    def test_lets_current_item_finish_when_processing(self, settings):
        process = ConsumerProcess(settings)
        process._consumer = StubConsumer(ConsumerState.PROCESSING)
        process._shutdown(signal.SIGTERM, None)
        assert process._consumer.stopped

    def test_interrupts_before_consumer_exists(self, settings):
        process = ConsumerProcess(settings)
        with pytest.raises(KeyboardInterrupt):
            process._shutdown(signal.SIGINT, None)
