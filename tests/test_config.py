from __future__ import annotations

from pathlib import Path

import allure
import pytest

from transfer_bridge.config import GlobusSettings, MonitorSettings, Settings

pytestmark = [
    allure.epic("Configuration"),
    allure.feature("Monitor Settings"),
]


def _valid_settings(**monitor_overrides: object) -> Settings:
    return Settings(
        globus=GlobusSettings(endpoint_id="endpoint-1", access_token="token"),
        monitor=MonitorSettings(**monitor_overrides),  # type: ignore[arg-type]
    )


def test_defaults_match_recommended_poll_policy() -> None:
    settings = Settings()

    assert settings.monitor.poll_interval_seconds == 10.0
    assert settings.monitor.lookback_days == 7
    assert settings.monitor.page_limit == 1000


def test_validate_for_monitor_requires_endpoint_id() -> None:
    settings = Settings(globus=GlobusSettings(access_token="token"))

    with pytest.raises(ValueError, match="endpoint id is required"):
        settings.validate_for_monitor()

    settings.validate_for_monitor(endpoint_id_override="endpoint-1")


def test_validate_for_monitor_requires_access_token() -> None:
    settings = Settings(globus=GlobusSettings(endpoint_id="endpoint-1"))

    with pytest.raises(ValueError, match="ACCESS_TOKEN"):
        settings.validate_for_monitor()


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"poll_interval_seconds": 0.0}, "POLL_INTERVAL_SECONDS"),
        ({"lookback_days": 0}, "LOOKBACK_DAYS"),
        ({"page_limit": -1}, "PAGE_LIMIT"),
    ],
)
def test_validate_for_monitor_rejects_non_positive_values(
    overrides: dict[str, object],
    message: str,
) -> None:
    with pytest.raises(ValueError, match=message):
        _valid_settings(**overrides).validate_for_monitor()


def test_validate_for_monitor_rejects_invalid_base_url() -> None:
    settings = Settings(
        globus=GlobusSettings(
            endpoint_id="endpoint-1",
            access_token="token",
            base_url="transfer.example.org",
        ),
    )

    with pytest.raises(ValueError, match="Invalid TRANSFER_BRIDGE_GLOBUS_BASE_URL"):
        settings.validate_for_monitor()


def test_from_env_reads_monitor_and_globus_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRANSFER_BRIDGE_DB_PATH", "/tmp/bridge.db")
    monkeypatch.setenv("TRANSFER_BRIDGE_GLOBUS_ENDPOINT_ID", " endpoint-1 ")
    monkeypatch.setenv("TRANSFER_BRIDGE_GLOBUS_ACCESS_TOKEN", "token")
    monkeypatch.setenv("TRANSFER_BRIDGE_MONITOR_POLL_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("TRANSFER_BRIDGE_MONITOR_LOOKBACK_DAYS", "3")
    monkeypatch.setenv("TRANSFER_BRIDGE_MONITOR_PAGE_LIMIT", "50")
    monkeypatch.setenv("TRANSFER_BRIDGE_MONITOR_REMOVE_ACL", "off")

    settings = Settings.from_env()

    assert settings.db_path == Path("/tmp/bridge.db")
    assert settings.globus.endpoint_id == "endpoint-1"
    assert settings.monitor.poll_interval_seconds == 2.5
    assert settings.monitor.lookback_days == 3
    assert settings.monitor.page_limit == 50
    assert settings.monitor.remove_acl is False
    settings.validate_for_monitor()


def test_from_env_db_path_argument_overrides_environment(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("TRANSFER_BRIDGE_DB_PATH", "/tmp/ignored.db")

    settings = Settings.from_env(db_path=tmp_path / "cli.db")

    assert settings.db_path == tmp_path / "cli.db"


def test_from_env_rejects_invalid_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRANSFER_BRIDGE_MONITOR_REMOVE_ACL", "maybe")

    with pytest.raises(ValueError, match="Invalid boolean value"):
        Settings.from_env()
