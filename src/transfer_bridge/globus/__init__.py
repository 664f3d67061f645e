"""Globus transfer service client and records."""

from transfer_bridge.globus.client import GlobusTransferClient
from transfer_bridge.globus.models import (
    Task,
    TaskList,
    TransferItem,
    TransferItems,
    TransferServiceError,
)

__all__ = [
    "GlobusTransferClient",
    "Task",
    "TaskList",
    "TransferItem",
    "TransferItems",
    "TransferServiceError",
]
