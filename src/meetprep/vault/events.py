"""Serialized processing of filesystem change events.

All index mutations after the initial scan go through one ChangeQueue: a
FIFO drained by exactly one worker thread, so two rapid events for the same
file are always applied in arrival order.

The queue holds at most ``max_pending`` items. Producers block once it is
full, and an event identical to one still waiting for the same path is
coalesced into the waiting one.
"""

import functools
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

from meetprep.vault.models import FileEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_PENDING = 1024


class ChangeQueue:
    """Single-consumer FIFO queue for file events and index tasks."""

    def __init__(
        self,
        handler: Callable[[FileEvent], None],
        name: str = "vault-events",
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        """Initialize the queue.

        Args:
            handler: Called on the worker thread for each event.
            name: Worker thread name prefix.
            max_pending: Items allowed in flight before submit blocks.
        """
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self._handler = handler
        self._name = name
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._pending = 0
        self._slots = threading.BoundedSemaphore(max_pending)
        self._queued: dict[str, tuple[FileEvent, Future]] = {}

    @property
    def running(self) -> bool:
        return self._executor is not None

    @property
    def pending(self) -> int:
        """Number of submitted items not yet finished."""
        with self._lock:
            return self._pending

    def start(self) -> None:
        """Start the worker. Calling start on a running queue is a no-op."""
        with self._lock:
            if self._executor is not None:
                logger.warning("Change queue already running")
                return
            # One worker is what makes the queue serial
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self._name)
        logger.debug("Change queue started")

    def stop(self, wait: bool = True) -> None:
        """Stop the worker, finishing queued items first when ``wait`` is True."""
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is None:
            return
        executor.shutdown(wait=wait, cancel_futures=not wait)
        logger.debug("Change queue stopped")

    def submit(self, event: FileEvent) -> Future | None:
        """Queue an event. Returns None if the queue is not running.

        If the newest queued item for the same path is an identical event
        that has not started yet, that item's future is returned instead.
        Handlers read the file when they run, so the queued event already
        covers this one.
        """
        return self._submit(self._process, event, event=event)

    def run(self, task: Callable[[], T]) -> Future:
        """Queue an arbitrary task behind pending events.

        Unlike events, exceptions raised by ``task`` are delivered through the
        returned future.

        Raises:
            RuntimeError: If the queue is not running.
        """
        future = self._submit(task)
        if future is None:
            raise RuntimeError("Change queue is not running")
        return future

    def drain(self, timeout: float | None = None) -> bool:
        """Block until everything queued so far has been processed.

        Returns False on timeout or when the queue is not running.
        """
        future = self._submit(lambda: None)
        if future is None:
            return False
        try:
            future.result(timeout=timeout)
        except TimeoutError:
            return False
        return True

    def _queued_duplicate(self, event: FileEvent) -> Future | None:
        """Future of an identical event for the same path that has not started. Needs the lock."""
        queued = self._queued.get(event.path)
        if queued is None:
            return None
        queued_event, future = queued
        if queued_event != event or future.running() or future.done():
            return None
        return future

    def _submit(self, fn: Callable, *args, event: FileEvent | None = None) -> Future | None:
        if event is not None:
            with self._lock:
                duplicate = self._queued_duplicate(event)
            if duplicate is not None:
                logger.debug("Coalesced %s event for %s", event.kind.value, event.path)
                return duplicate

        # Blocks the producer while max_pending items are outstanding
        self._slots.acquire()
        with self._lock:
            if self._executor is None:
                self._slots.release()
                logger.debug("Change queue not running, dropping %s", args or fn)
                return None
            if event is not None:
                duplicate = self._queued_duplicate(event)
                if duplicate is not None:
                    self._slots.release()
                    return duplicate
            self._pending += 1
            try:
                future = self._executor.submit(fn, *args)
            except RuntimeError:
                # Shut down between the check and the submit
                self._pending -= 1
                self._slots.release()
                return None
            if event is not None:
                self._queued[event.path] = (event, future)
        future.add_done_callback(functools.partial(self._on_done, event.path if event else None))
        return future

    def _on_done(self, path: str | None, future: Future) -> None:
        with self._lock:
            self._pending -= 1
            if path is not None and self._queued.get(path, (None, None))[1] is future:
                del self._queued[path]
        self._slots.release()

    def _process(self, event: FileEvent) -> None:
        try:
            self._handler(event)
        except Exception:
            logger.exception("Error processing %s event for %s", event.kind.value, event.path)
