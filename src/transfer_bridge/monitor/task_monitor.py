"""Background monitor that turns completed Globus uploads into file loads.

Every poll cycle lists the recently succeeded tasks on one endpoint, admits
the ones that completed after the watermark, recovers the routing id from the
destination path of each task's first transferred file and hands it to the
downstream pipeline once per process lifetime. Failures never stop the loop:
a failed query abandons the cycle, a bad task is skipped.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from transfer_bridge.common import parse_rfc3339, utc_now
from transfer_bridge.globus.models import Task, TaskList, TransferItems, TransferServiceError
from transfer_bridge.monitor.state import InMemoryMonitorState, MonitorState
from transfer_bridge.uploads.handoff import UploadReadyHandler

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_LOOKBACK_DAYS = 7
DEFAULT_PAGE_LIMIT = 1000

# "", <category>, <routing id>, <project>, <rest...>
MIN_DESTINATION_PIECES = 5
ROUTING_ID_INDEX = 2


class TransferTaskSource(Protocol):
    """Upstream capability: the transfer service's task listing."""

    def list_recent_succeeded_tasks(
        self,
        endpoint_id: str,
        *,
        completed_after: str,
        limit: int,
    ) -> TaskList:
        raise NotImplementedError

    def list_successful_transfer_items(self, task_id: str, marker: int = 0) -> TransferItems:
        raise NotImplementedError


class TaskOutcome(str, Enum):
    """What happened to one task within a poll cycle."""

    HANDED_OFF = "handed_off"
    INVALID_COMPLETION_TIME = "invalid_completion_time"
    NOT_AFTER_WATERMARK = "not_after_watermark"
    FETCH_FAILED = "fetch_failed"
    NO_TRANSFERS = "no_transfers"
    DOWNLOAD = "download"
    MALFORMED_PATH = "malformed_path"
    ALREADY_HANDLED = "already_handled"
    HANDOFF_FAILED = "handoff_failed"
    TASK_FAILED = "task_failed"


@dataclass(slots=True)
class MonitorCycleSummary:
    """Counters for one or more poll cycles."""

    cycles: int = 0
    query_failures: int = 0
    tasks_seen: int = 0
    handed_off: int = 0
    invalid_completion_time: int = 0
    not_after_watermark: int = 0
    fetch_failed: int = 0
    no_transfers: int = 0
    download: int = 0
    malformed_path: int = 0
    already_handled: int = 0
    handoff_failed: int = 0
    task_failed: int = 0
    cancelled: bool = False

    def record(self, outcome: TaskOutcome) -> None:
        self.tasks_seen += 1
        field_name = outcome.value
        setattr(self, field_name, getattr(self, field_name) + 1)

    def merge(self, other: MonitorCycleSummary) -> None:
        self.cycles += other.cycles
        self.query_failures += other.query_failures
        self.tasks_seen += other.tasks_seen
        for outcome in TaskOutcome:
            name = outcome.value
            setattr(self, name, getattr(self, name) + getattr(other, name))
        self.cancelled = self.cancelled or other.cancelled


def routing_id_from_destination(destination_path: object) -> str | None:
    """Routing id of a staging destination path, ``None`` if it is too short."""

    if not isinstance(destination_path, str):
        return None
    pieces = destination_path.split("/")
    if len(pieces) < MIN_DESTINATION_PIECES:
        return None
    return pieces[ROUTING_ID_INDEX]


class TaskCompletionMonitor:
    """Polls one endpoint for succeeded tasks and hands off finished uploads.

    At most one monitor may run per endpoint; the watermark and the handled
    set are mutated only by the monitor's own loop.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        client: TransferTaskSource,
        handler: UploadReadyHandler,
        endpoint_id: str,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        state: MonitorState | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.handler = handler
        self.endpoint_id = endpoint_id
        self.poll_interval_seconds = poll_interval_seconds
        self.lookback_days = lookback_days
        self.page_limit = page_limit
        self.state: MonitorState = state if state is not None else InMemoryMonitorState()
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._loop_lock = threading.Lock()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def start(self) -> threading.Thread:
        """Run the poll loop on a background daemon thread."""

        if self._thread is not None:
            raise RuntimeError("Task completion monitor is already started.")
        logger.info("Starting globus task monitor for endpoint %s...", self.endpoint_id)
        self._thread = threading.Thread(
            target=self.run_loop,
            name=f"globus-task-monitor-{self.endpoint_id}",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop_event.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run_loop(
        self,
        *,
        max_cycles: int | None = None,
        install_signal_handlers: bool = False,
    ) -> MonitorCycleSummary:
        """Poll until stopped (or ``max_cycles`` cycles have run).

        Only one loop may run per monitor; a second call while the loop is
        running (for example on the thread from :meth:`start`) raises
        ``RuntimeError``.
        """

        if not self._loop_lock.acquire(blocking=False):
            raise RuntimeError("Task completion monitor loop is already running.")
        try:
            return self._run_loop(max_cycles, install_signal_handlers=install_signal_handlers)
        finally:
            self._loop_lock.release()

    def _run_loop(
        self,
        max_cycles: int | None,
        *,
        install_signal_handlers: bool,
    ) -> MonitorCycleSummary:
        aggregate = MonitorCycleSummary()
        with self._signal_handlers(enabled=install_signal_handlers):
            while not self.stop_requested:
                try:
                    aggregate.merge(self.poll_once())
                except Exception:
                    logger.exception("Unexpected error during globus task poll cycle")
                    aggregate.cycles += 1
                if max_cycles is not None and aggregate.cycles >= max_cycles:
                    break
                if self._stop_event.wait(self.poll_interval_seconds):
                    break
        if self.stop_requested:
            aggregate.cancelled = True
            logger.info("Shutting down globus monitoring...")
        return aggregate

    def poll_once(self) -> MonitorCycleSummary:
        """Run one poll cycle."""

        summary = MonitorCycleSummary(cycles=1)
        completed_after = (self._clock() - timedelta(days=self.lookback_days)).date().isoformat()
        try:
            task_list = self.client.list_recent_succeeded_tasks(
                self.endpoint_id,
                completed_after=completed_after,
                limit=self.page_limit,
            )
        except TransferServiceError as error:
            logger.warning("Listing globus tasks for endpoint %s failed: %s", self.endpoint_id, error)
            summary.query_failures = 1
            return summary

        for task in task_list.tasks:
            try:
                outcome = self._process_task(task)
            except Exception:
                logger.exception("Unexpected error processing globus task %s", task.task_id)
                outcome = TaskOutcome.TASK_FAILED
            summary.record(outcome)
            if self.stop_requested:
                summary.cancelled = True
                break
        return summary

    def _process_task(self, task: Task) -> TaskOutcome:
        rejection = self._admission_rejection(task)
        if rejection is not None:
            return rejection

        try:
            transfers = self.client.list_successful_transfer_items(task.task_id, 0)
        except TransferServiceError as error:
            logger.warning("Listing successful transfers for task %s failed: %s", task.task_id, error)
            return TaskOutcome.FETCH_FAILED

        if not transfers.transfers:
            return TaskOutcome.NO_TRANSFERS

        item = transfers.transfers[0]
        if item.is_download:
            return TaskOutcome.DOWNLOAD

        routing_id = routing_id_from_destination(item.destination_path)
        if routing_id is None:
            logger.warning(
                "Invalid globus destination path for task %s: %r",
                task.task_id,
                item.destination_path,
            )
            return TaskOutcome.MALFORMED_PATH

        if self.state.is_handled(routing_id):
            return TaskOutcome.ALREADY_HANDLED

        self.state.mark_handled(routing_id)
        logger.info("Processing globus upload %s (task %s)", routing_id, task.task_id)
        try:
            self.handler.on_upload_ready(routing_id)
        except Exception:
            logger.exception("Hand-off of globus upload %s failed", routing_id)
            return TaskOutcome.HANDOFF_FAILED
        logger.info("Handed off globus upload %s", routing_id)
        return TaskOutcome.HANDED_OFF

    def _admission_rejection(self, task: Task) -> TaskOutcome | None:
        try:
            completed_at = parse_rfc3339(task.completion_time)
        except ValueError as error:
            logger.error(
                "Error parsing completion time %r of task %s: %s",
                task.completion_time,
                task.task_id,
                error,
            )
            return TaskOutcome.INVALID_COMPLETION_TIME
        if completed_at <= self.state.watermark:
            return TaskOutcome.NOT_AFTER_WATERMARK
        return None

    @contextmanager
    def _signal_handlers(self, *, enabled: bool) -> Iterator[None]:
        if not enabled or not hasattr(signal, "SIGINT"):
            yield
            return

        def _handler(signum: int, _: object | None) -> None:
            logger.info("Received signal %s, stopping globus task monitor", signum)
            self.stop()

        originals: dict[int, object] = {}
        try:
            for signum in (signal.SIGINT, signal.SIGTERM):
                originals[signum] = signal.getsignal(signum)
                signal.signal(signum, _handler)
        except ValueError:
            # Signal handlers can only be installed in main thread.
            pass
        try:
            yield
        finally:
            for signum, original in originals.items():
                try:
                    signal.signal(signum, original)  # type: ignore[arg-type]
                except ValueError:
                    pass
