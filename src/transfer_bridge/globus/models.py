"""Records and errors of the Globus transfer service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TASK_STATUS_SUCCEEDED = "SUCCEEDED"


@dataclass(slots=True)
class TransferServiceError(Exception):
    """Transient failure talking to the transfer service."""

    message: str
    code: str = "transfer_service_error"
    status_code: int | None = None
    request_id: str | None = None

    def __str__(self) -> str:
        parts = [self.message, f"code={self.code}"]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.request_id:
            parts.append(f"request_id={self.request_id}")
        return " ".join(parts)


@dataclass(slots=True)
class Task:
    """One transfer task as listed by the endpoint manager."""

    task_id: str
    completion_time: str | None = None
    status: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Task:
        return cls(
            task_id=str(payload.get("task_id", "")),
            completion_time=_raw_text(payload.get("completion_time")),
            status=str(payload.get("status", "")),
        )


@dataclass(slots=True)
class TaskList:
    tasks: list[Task] = field(default_factory=list)
    next_token: str | None = None


@dataclass(slots=True)
class TransferItem:
    """A single transferred file. Downloads have an empty destination path."""

    source_path: str = ""
    destination_path: str = ""

    @property
    def is_download(self) -> bool:
        return self.destination_path == ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TransferItem:
        return cls(
            source_path=_path_value(payload, "source_path"),
            destination_path=_path_value(payload, "destination_path"),
        )


@dataclass(slots=True)
class TransferItems:
    transfers: list[TransferItem] = field(default_factory=list)
    next_marker: int | None = None


def _raw_text(value: object) -> str | None:
    # Keep unexpected scalars visible so the admission filter rejects and logs them.
    if value is None or isinstance(value, str):
        return value
    return repr(value)


def _path_value(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"unexpected {key} in transfer item: {value!r}")
    return value
