"""Controllers for monitor CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from transfer_bridge.config import Settings
from transfer_bridge.globus.client import GlobusTransferClient
from transfer_bridge.monitor.task_monitor import MonitorCycleSummary, TaskCompletionMonitor
from transfer_bridge.uploads.controllers import upload_repository
from transfer_bridge.uploads.handoff import FileLoadHandoff

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MonitorRunCommand:
    """CLI inputs for the monitor run command."""

    db_path: Path | None
    endpoint_id: str | None
    poll_interval_seconds: float | None
    once: bool


class MonitorCliController:
    """Builds the monitor from settings and runs it in the foreground."""

    def run(self, command: MonitorRunCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        if command.poll_interval_seconds is not None:
            settings.monitor.poll_interval_seconds = command.poll_interval_seconds
        settings.validate_for_monitor(endpoint_id_override=command.endpoint_id)
        endpoint_id = command.endpoint_id or settings.globus.endpoint_id

        with (
            upload_repository(settings) as repository,
            GlobusTransferClient(
                access_token=settings.globus.access_token,
                base_url=settings.globus.base_url,
                timeout_seconds=settings.globus.timeout_seconds,
                max_retries=settings.globus.max_retries,
            ) as client,
        ):
            handler = FileLoadHandoff(
                repository=repository,
                acl_client=client if settings.monitor.remove_acl else None,
                endpoint_id=endpoint_id,
            )
            monitor = TaskCompletionMonitor(
                client=client,
                handler=handler,
                endpoint_id=endpoint_id,
                poll_interval_seconds=settings.monitor.poll_interval_seconds,
                lookback_days=settings.monitor.lookback_days,
                page_limit=settings.monitor.page_limit,
            )
            if command.once:
                summary = monitor.poll_once()
            else:
                logger.info("Starting globus task monitor for endpoint %s...", endpoint_id)
                summary = monitor.run_loop(install_signal_handlers=True)

        return [_format_summary(endpoint_id, summary)]


def _format_summary(endpoint_id: str, summary: MonitorCycleSummary) -> str:
    return (
        "Globus task monitor finished: "
        f"endpoint={endpoint_id} cycles={summary.cycles} "
        f"query_failures={summary.query_failures} "
        f"tasks={summary.tasks_seen} "
        f"handed_off={summary.handed_off} "
        f"already_handled={summary.already_handled} "
        f"not_after_watermark={summary.not_after_watermark} "
        f"invalid_time={summary.invalid_completion_time} "
        f"fetch_failed={summary.fetch_failed} "
        f"no_transfers={summary.no_transfers} "
        f"downloads={summary.download} "
        f"malformed={summary.malformed_path} "
        f"handoff_failed={summary.handoff_failed} "
        f"task_failed={summary.task_failed}"
    )
