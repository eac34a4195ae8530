"""Concurrent rendering: one work item per pixel, fanned out to a fixed pool
of worker threads and fanned back in through a single writer.

The pipeline is three stages connected by closable channels::

    WorkQueue --jobs--> WorkerPool (N threads) --results--> ResultSink

Only the :class:`ResultSink` thread writes into the image buffer. The pool
closes the results channel after it has counted one "done" signal from each
worker, so the sink sees every result before it sees the closure.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

import numpy as np

from .color import Color
from .errors import ConfigurationError, RenderError
from .evaluator import MAX_ITERATIONS, evaluate
from .viewport import PixelGrid, Viewport, prepare_render

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4
QUEUE_DEPTH = 64

_CLOSED = object()


@dataclass(frozen=True)
class WorkItem:
    x: int
    y: int
    c: complex


@dataclass(frozen=True)
class RenderResult:
    x: int
    y: int
    color: Color


class Channel:
    """A FIFO that can be closed once; iteration ends when it is closed and drained."""

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue = queue.Queue(maxsize)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item) -> None:
        if self._closed:
            raise RuntimeError("send on closed channel")
        self._queue.put(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("channel already closed")
            self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                # Hand the marker on so every other receiver also stops.
                self._queue.put(_CLOSED)
                return
            yield item


class WorkQueue:
    """Produce exactly one :class:`WorkItem` per pixel, then close the channel."""

    def __init__(self, viewport: Viewport, grid: PixelGrid, maxsize: int = 0) -> None:
        self.viewport = viewport
        self.grid = grid
        self.channel = Channel(maxsize)
        self.produced = 0
        self.error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._produce, name="work-queue", daemon=True)

    def items(self) -> Iterator[WorkItem]:
        for x in range(self.grid.width):
            for y in range(self.grid.height):
                yield WorkItem(x, y, self.viewport.map_pixel(x, y, self.grid))

    def start(self) -> Channel:
        self._thread.start()
        return self.channel

    def _produce(self) -> None:
        try:
            for item in self.items():
                self.channel.send(item)
                self.produced += 1
        except Exception as exc:
            logger.exception("work queue stopped after %d items", self.produced)
            self.error = exc
        finally:
            self.channel.close()


class WorkerPool:
    """Fixed number of threads turning work items into render results."""

    def __init__(
        self,
        count: int,
        jobs: Channel,
        results: Channel,
        *,
        max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        if count < 1:
            raise ConfigurationError(f"worker count must be at least 1, got {count}")
        self.count = count
        self.jobs = jobs
        self.results = results
        self.max_iterations = max_iterations
        self.errors: list[BaseException] = []
        self._errors_lock = threading.Lock()
        self._done: queue.Queue = queue.Queue()

    def start(self) -> None:
        logger.info("starting %d render workers", self.count)
        for index in range(self.count):
            threading.Thread(target=self._work, args=(index,), name=f"render-worker-{index}", daemon=True).start()
        threading.Thread(target=self._close_when_done, name="render-barrier", daemon=True).start()

    def _work(self, index: int) -> None:
        logger.debug("worker %d started", index)
        evaluated = 0
        try:
            for item in self.jobs:
                self.results.send(RenderResult(item.x, item.y, evaluate(item.c, self.max_iterations)))
                evaluated += 1
        except Exception as exc:
            logger.exception("worker %d failed after %d items", index, evaluated)
            with self._errors_lock:
                self.errors.append(exc)
            # Keep consuming so the producer is never left blocked on a full queue.
            for _ in self.jobs:
                continue
        finally:
            logger.debug("worker %d done after %d items", index, evaluated)
            self._done.put(index)

    def _close_when_done(self) -> None:
        for _ in range(self.count):
            self._done.get()
        self.results.close()


class ResultSink:
    """The single writer of the image buffer."""

    def __init__(self, buffer: np.ndarray, results: Channel) -> None:
        self.buffer = buffer
        self.results = results
        self.written = 0
        self.error: Optional[BaseException] = None
        self.completed = threading.Event()
        self._thread = threading.Thread(target=self._collect, name="result-sink", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def wait(self) -> int:
        self.completed.wait()
        return self.written

    def _collect(self) -> None:
        try:
            for result in self.results:
                self.buffer[result.y, result.x] = result.color
                self.written += 1
        except Exception as exc:
            logger.exception("result sink failed after %d pixels", self.written)
            self.error = exc
            for _ in self.results:
                continue
        finally:
            self.completed.set()


def render_concurrent(
    buffer: np.ndarray,
    top_left: complex,
    bottom_right: complex,
    *,
    workers: int = DEFAULT_WORKERS,
    max_iterations: int = MAX_ITERATIONS,
    queue_size: Optional[int] = None,
) -> int:
    """Render ``buffer`` with ``workers`` threads and block until it is fully written.

    Returns the number of pixels written. Raises :class:`ConfigurationError`
    before any thread is started when the inputs are unusable, and
    :class:`RenderError` when a stage failed or pixels are missing.
    """

    grid, viewport = prepare_render(buffer, top_left, bottom_right)
    if queue_size is None:
        queue_size = max(workers, 1) * QUEUE_DEPTH

    work = WorkQueue(viewport, grid, maxsize=queue_size)
    results = Channel()
    pool = WorkerPool(workers, work.channel, results, max_iterations=max_iterations)
    sink = ResultSink(buffer, results)

    sink.start()
    pool.start()
    work.start()
    written = sink.wait()

    failure = work.error or (pool.errors[0] if pool.errors else None) or sink.error
    if failure is not None:
        raise RenderError(f"concurrent render failed: {failure}") from failure
    if written != grid.size:
        raise RenderError(f"concurrent render wrote {written} of {grid.size} pixels")
    logger.info("concurrent render wrote %d pixels with %d workers", written, workers)
    return written
