"""
Progress Notification
=====================

One-way progress channel from a running pack/unpack call to its caller.

A sink receives a single float in [0, 1] per processed asset or entry.
Delivery is best-effort and in order for the lifetime of one call. A sink
that raises is treated as a broken channel and surfaces as NotifierError.
"""

import logging
import queue
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

from emmm_core.errors import NotifierError

logger = logging.getLogger(__name__)

# Type alias for plain progress callbacks
ProgressCallback = Callable[[float], None]


class ProgressSink(ABC):
    """Receiver of progress fractions."""

    @abstractmethod
    def notify(self, fraction: float) -> None:
        """Deliver one progress fraction."""
        pass


class NullProgressSink(ProgressSink):
    """Discards every notification."""

    def notify(self, fraction: float) -> None:
        pass


class CallbackProgressSink(ProgressSink):
    """Forwards notifications to a callable."""

    def __init__(self, callback: ProgressCallback):
        self.callback = callback

    def notify(self, fraction: float) -> None:
        self.callback(fraction)


class QueueProgressSink(ProgressSink):
    """
    Puts notifications on a queue.

    The queue is the message-passing channel: the worker only puts, the
    caller only gets.
    """

    def __init__(self, channel: Optional[queue.Queue] = None):
        self.channel = channel if channel is not None else queue.Queue()

    def notify(self, fraction: float) -> None:
        self.channel.put_nowait(fraction)


def as_sink(progress: Union[None, ProgressSink, ProgressCallback]) -> ProgressSink:
    """
    Normalize a progress argument into a ProgressSink.

    Args:
        progress: None, an existing sink, or a callable taking a float

    Returns:
        ProgressSink instance
    """
    if progress is None:
        return NullProgressSink()
    if isinstance(progress, ProgressSink):
        return progress
    if callable(progress):
        return CallbackProgressSink(progress)
    raise TypeError(f"Unsupported progress sink: {progress!r}")


def emit(sink: ProgressSink, fraction: float) -> None:
    """Send a fraction to a sink, turning sink failures into NotifierError."""
    try:
        sink.notify(fraction)
    except Exception as e:
        logger.error(f"Progress sink failed at {fraction:.3f}: {e}")
        raise NotifierError(f"Progress notification failed: {e}") from e
