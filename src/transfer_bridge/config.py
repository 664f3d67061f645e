"""Runtime configuration for the globus transfer bridge."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_GLOBUS_BASE_URL = "https://transfer.api.globusonline.org/v0.10"


@dataclass(slots=True)
class GlobusSettings:
    """Transfer service connection settings."""

    endpoint_id: str = ""
    access_token: str = ""
    base_url: str = DEFAULT_GLOBUS_BASE_URL
    timeout_seconds: float = 30.0
    max_retries: int = 3


@dataclass(slots=True)
class MonitorSettings:
    """Task completion monitor settings."""

    poll_interval_seconds: float = 10.0
    lookback_days: int = 7
    page_limit: int = 1000
    remove_acl: bool = True


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    db_path: Path = Path(".transfer_bridge.db")
    log_level: str = "INFO"
    globus: GlobusSettings = field(default_factory=GlobusSettings)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)

    @classmethod
    def from_env(cls, db_path: Path | None = None) -> Settings:
        """Load settings from environment with sane defaults for local development."""

        return cls(
            db_path=db_path or Path(os.getenv("TRANSFER_BRIDGE_DB_PATH", ".transfer_bridge.db")),
            log_level=os.getenv("TRANSFER_BRIDGE_LOG_LEVEL", "INFO").strip().upper(),
            globus=GlobusSettings(
                endpoint_id=os.getenv("TRANSFER_BRIDGE_GLOBUS_ENDPOINT_ID", "").strip(),
                access_token=os.getenv("TRANSFER_BRIDGE_GLOBUS_ACCESS_TOKEN", "").strip(),
                base_url=os.getenv("TRANSFER_BRIDGE_GLOBUS_BASE_URL", DEFAULT_GLOBUS_BASE_URL),
                timeout_seconds=float(
                    os.getenv("TRANSFER_BRIDGE_GLOBUS_TIMEOUT_SECONDS", "30.0"),
                ),
                max_retries=int(os.getenv("TRANSFER_BRIDGE_GLOBUS_MAX_RETRIES", "3")),
            ),
            monitor=MonitorSettings(
                poll_interval_seconds=float(
                    os.getenv("TRANSFER_BRIDGE_MONITOR_POLL_INTERVAL_SECONDS", "10.0"),
                ),
                lookback_days=int(os.getenv("TRANSFER_BRIDGE_MONITOR_LOOKBACK_DAYS", "7")),
                page_limit=int(os.getenv("TRANSFER_BRIDGE_MONITOR_PAGE_LIMIT", "1000")),
                remove_acl=_env_bool("TRANSFER_BRIDGE_MONITOR_REMOVE_ACL", default=True),
            ),
        )

    def validate_for_monitor(self, endpoint_id_override: str | None = None) -> None:
        """Raise configuration error if the monitor cannot run with these settings."""

        if not (endpoint_id_override or self.globus.endpoint_id):
            raise ValueError(
                "A globus endpoint id is required. "
                "Set TRANSFER_BRIDGE_GLOBUS_ENDPOINT_ID or pass --endpoint-id.",
            )
        if not self.globus.access_token:
            raise ValueError("TRANSFER_BRIDGE_GLOBUS_ACCESS_TOKEN must be set.")
        _validate_base_url(self.globus.base_url)
        if self.globus.timeout_seconds <= 0:
            raise ValueError("TRANSFER_BRIDGE_GLOBUS_TIMEOUT_SECONDS must be > 0.")
        if self.globus.max_retries < 0:
            raise ValueError("TRANSFER_BRIDGE_GLOBUS_MAX_RETRIES must be >= 0.")
        if self.monitor.poll_interval_seconds <= 0:
            raise ValueError("TRANSFER_BRIDGE_MONITOR_POLL_INTERVAL_SECONDS must be > 0.")
        if self.monitor.lookback_days <= 0:
            raise ValueError("TRANSFER_BRIDGE_MONITOR_LOOKBACK_DAYS must be > 0.")
        if self.monitor.page_limit <= 0:
            raise ValueError("TRANSFER_BRIDGE_MONITOR_PAGE_LIMIT must be > 0.")


def _validate_base_url(value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            "Invalid TRANSFER_BRIDGE_GLOBUS_BASE_URL: "
            f"{value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
