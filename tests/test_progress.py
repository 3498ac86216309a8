"""
Progress Sink Tests

Run with: pytest tests/test_progress.py -v
"""

import queue

import pytest

from emmm_core.errors import NotifierError, WorkerError
from emmm_core.progress import (
    CallbackProgressSink,
    NullProgressSink,
    QueueProgressSink,
    as_sink,
    emit,
)


class TestAsSink:
    """Tests for progress argument normalization."""

    def test_none(self):
        assert isinstance(as_sink(None), NullProgressSink)

    def test_existing_sink_is_kept(self):
        sink = QueueProgressSink()
        assert as_sink(sink) is sink

    def test_callable_is_wrapped(self):
        received = []
        sink = as_sink(received.append)
        assert isinstance(sink, CallbackProgressSink)
        sink.notify(0.5)
        assert received == [0.5]

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            as_sink(42)


class TestEmit:
    """Tests for delivering fractions."""

    def test_queue_channel(self):
        channel = queue.Queue()
        sink = QueueProgressSink(channel)

        emit(sink, 0.5)
        emit(sink, 1.0)

        assert [channel.get_nowait(), channel.get_nowait()] == [0.5, 1.0]

    def test_sink_failure_becomes_notifier_error(self):
        def broken(fraction):
            raise ConnectionError("receiver gone")

        with pytest.raises(NotifierError) as exc_info:
            emit(as_sink(broken), 1.0)

        assert isinstance(exc_info.value, WorkerError)
        assert isinstance(exc_info.value.__cause__, ConnectionError)
