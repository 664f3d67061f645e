"""Globus task completion monitor."""

from transfer_bridge.monitor.state import InMemoryMonitorState, MonitorState
from transfer_bridge.monitor.task_monitor import (
    MonitorCycleSummary,
    TaskCompletionMonitor,
    TaskOutcome,
    TransferTaskSource,
    routing_id_from_destination,
)

__all__ = [
    "InMemoryMonitorState",
    "MonitorCycleSummary",
    "MonitorState",
    "TaskCompletionMonitor",
    "TaskOutcome",
    "TransferTaskSource",
    "routing_id_from_destination",
]
