"""
Lightweight EventBus used by the lifecycle service and its listeners.

Key invariants (enforced by call sites + tests):
  - Event topics come from enums in sensor_client.enums.events.
  - Payloads are typed dataclasses / Pydantic models in sensor_client.schemas.events.
  - Subscribers always receive a plain dict payload.
  - Publishing never blocks: callbacks run on a small worker pool fed by a
    bounded queue, and a full queue drops the event.
"""
import logging
import threading
import time
from collections import defaultdict
from dataclasses import asdict, is_dataclass
from enum import Enum
from queue import Empty, Full, Queue
from typing import Any, Callable, Dict, Hashable, Iterable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Drop warning configuration
_DROP_WARNING_THRESHOLD = 10  # Log summary every N drops
_DROP_WARNING_INTERVAL_SECONDS = 60  # Minimum seconds between drop summaries

_STOP = object()


class EventBus:
    """
    Handles event-driven communication across modules.

    One instance per ServiceContainer; it is handed to publishers and
    subscribers explicitly.
    """

    def __init__(self, queue_size: int = 1024, worker_count: int = 2) -> None:
        self.subscribers: Dict[Hashable, list[Callable[[Any], None]]] = defaultdict(list)
        self.lock = threading.Lock()
        self._queue_size = int(queue_size)
        self._queue: Queue = Queue(maxsize=self._queue_size)
        self._worker_pool_size = max(1, int(worker_count))
        self._workers: list[threading.Thread] = []
        self._workers_started = False
        self._dropped_events = 0
        self._drops_by_event: Dict[str, int] = defaultdict(int)
        self._drops_since_last_warning = 0
        self._last_drop_warning_time = 0.0
        self._start_workers()

    def _start_workers(self) -> None:
        """Spin up a small worker pool to avoid unbounded thread creation."""
        with self.lock:
            if self._workers_started:
                return
            for index in range(self._worker_pool_size):
                worker = threading.Thread(target=self._worker_loop, name=f"EventBusWorker-{index}", daemon=True)
                worker.start()
                self._workers.append(worker)
            self._workers_started = True
            logger.info(
                "EventBus workers started (pool=%s queue=%s)",
                self._worker_pool_size,
                self._queue_size,
            )

    def subscribe(self, event_name: Enum | str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """
        Subscribes a callback function to an event.

        Args:
            event_name: The enum topic (preferred) or raw string.
            callback: Function to call when the event occurs.

        Returns:
            A function that removes the subscription.
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name
        with self.lock:
            self.subscribers[name].append(callback)

        def unsubscribe() -> None:
            with self.lock:
                callbacks = self.subscribers.get(name, [])
                try:
                    callbacks.remove(callback)
                except ValueError:
                    return

        return unsubscribe

    def _worker_loop(self) -> None:
        """Worker thread loop to process events from the queue."""
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                event_name, callback, payload = item
                try:
                    callback(payload)
                except Exception as exc:
                    logger.error("Error in callback for event %s: %s", event_name, exc)
            finally:
                self._queue.task_done()

    def publish(self, event_name: Enum | str, data: Any | None = None) -> None:
        """
        Publishes an event, queueing a call to every subscribed callback.

        Args:
            event_name: The enum topic (preferred) or raw string.
            data: Payload object (Pydantic model, dataclass, or dict/primitive).
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name

        # Normalize payload for subscribers: they always receive a dict or primitive.
        if isinstance(data, BaseModel):
            payload: Any = data.model_dump(mode="json")
        elif is_dataclass(data):
            payload = asdict(data)
        else:
            payload = data

        with self.lock:
            callbacks: Iterable[Callable[[Any], None]] = list(self.subscribers.get(name, []))
        for callback in callbacks:
            try:
                self._queue.put_nowait((name, callback, payload))
            except Full:
                self._record_drop(name)
                break

    def join(self, timeout: float | None = None) -> bool:
        """Wait until every queued callback has run. Returns False on timeout."""
        if timeout is None:
            self._queue.join()
            return True
        deadline = time.monotonic() + timeout
        while self._queue.unfinished_tasks:
            if time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True

    def shutdown(self, timeout: float = 5.0) -> None:
        """Drain pending events and stop the worker pool."""
        with self.lock:
            if not self._workers_started:
                return
            self._workers_started = False
            workers = list(self._workers)
            self._workers.clear()

        self.join(timeout)
        for _ in workers:
            try:
                self._queue.put(_STOP, timeout=timeout)
            except Full:
                break
        for worker in workers:
            worker.join(timeout=timeout)
        # Discard anything published during shutdown.
        while True:
            try:
                self._queue.get_nowait()
            except Empty:
                break
            self._queue.task_done()
        logger.info("EventBus workers stopped")

    def _record_drop(self, event_name: str) -> None:
        """Record a dropped event and log periodic warnings."""
        self._dropped_events += 1
        self._drops_by_event[event_name] += 1
        self._drops_since_last_warning += 1

        now = time.time()
        should_warn = (
            self._drops_since_last_warning >= _DROP_WARNING_THRESHOLD
            and (now - self._last_drop_warning_time) >= _DROP_WARNING_INTERVAL_SECONDS
        )

        if should_warn:
            logger.warning(
                "EventBus dropping events! queue_size=%d, total_dropped=%d, recent_drops=%d. "
                "Consider increasing ARTIE_CLIENT_EVENTBUS_QUEUE_SIZE.",
                self._queue_size,
                self._dropped_events,
                self._drops_since_last_warning,
            )
            self._drops_since_last_warning = 0
            self._last_drop_warning_time = now

    def get_metrics(self) -> Dict[str, Any]:
        """Return lightweight metrics for the status endpoint/logging."""
        return {
            "queue_depth": self._queue.qsize(),
            "queue_size": self._queue_size,
            "dropped_events": self._dropped_events,
            "subscribers": sum(len(values) for values in self.subscribers.values()),
        }
