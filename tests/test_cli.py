from __future__ import annotations

from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from transfer_bridge.globus.client import GlobusTransferClient
from transfer_bridge.globus.models import Task, TaskList, TransferItem, TransferItems
from transfer_bridge.main import transfer_bridge

pytestmark = [
    allure.epic("Command Line"),
    allure.feature("transfer-bridge CLI"),
]


def test_path_decode_prints_fields() -> None:
    result = CliRunner().invoke(transfer_bridge, ["path", "decode", "/globus/5/9/data/f.txt"])

    assert result.exit_code == 0, result.output
    assert "category='globus'" in result.output
    assert "tenant_id=5" in result.output
    assert "project_id=9" in result.output
    assert "relative_path='/data/f.txt'" in result.output
    assert "scope=project" in result.output


def test_path_encode_scope_and_full_path() -> None:
    runner = CliRunner()
    base = ["path", "encode", "--category", "globus", "--tenant-id", "5", "--project-id", "9"]

    scope = runner.invoke(transfer_bridge, [*base, "--scope-only"])
    full = runner.invoke(transfer_bridge, [*base, "--relative-path", "/data", "--suffix", "f.txt"])

    assert scope.output.strip() == "/globus/5/9"
    assert full.output.strip() == "/globus/5/9/data/f.txt"


def test_path_encode_requires_category_value() -> None:
    result = CliRunner().invoke(
        transfer_bridge,
        ["path", "encode", "--category", "", "--tenant-id", "5", "--project-id", "9"],
    )

    assert result.exit_code != 0
    assert "category is required" in result.output


def test_uploads_add_and_list(tmp_path: Path) -> None:
    db_path = tmp_path / "cli.db"
    runner = CliRunner()

    added = runner.invoke(
        transfer_bridge,
        [
            "uploads",
            "add",
            "--db-path",
            str(db_path),
            "--id",
            "42",
            "--project-id",
            "9",
            "--owner-id",
            "5",
            "--path",
            "/globus/42/9",
        ],
    )
    listed = runner.invoke(transfer_bridge, ["uploads", "list", "--db-path", str(db_path)])

    assert added.exit_code == 0, added.output
    assert "Registered globus upload: id=42" in added.output
    assert "42\tproject=9\towner=5" in listed.output


def test_monitor_run_requires_endpoint_id(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        transfer_bridge,
        ["monitor", "run", "--once", "--db-path", str(tmp_path / "m.db")],
    )

    assert result.exit_code != 0
    assert "endpoint id is required" in result.output


def test_monitor_run_once_creates_file_load(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    db_path = tmp_path / "monitor.db"
    monkeypatch.setenv("TRANSFER_BRIDGE_GLOBUS_ACCESS_TOKEN", "token")
    deleted_acls: list[tuple[str, str]] = []

    def _list_tasks(
        _self: GlobusTransferClient,
        _endpoint_id: str,
        *,
        completed_after: str,  # noqa: ARG001
        limit: int,  # noqa: ARG001
    ) -> TaskList:
        return TaskList(tasks=[Task(task_id="t1", completion_time="2026-02-19T10:00:00Z")])

    def _list_transfers(
        _self: GlobusTransferClient,
        _task_id: str,
        _marker: int = 0,
    ) -> TransferItems:
        return TransferItems(
            transfers=[TransferItem(source_path="/src/f", destination_path="/globus/42/9/f")],
        )

    def _delete_acl(_self: GlobusTransferClient, endpoint_id: str, acl_id: str) -> None:
        deleted_acls.append((endpoint_id, acl_id))

    monkeypatch.setattr(GlobusTransferClient, "list_recent_succeeded_tasks", _list_tasks)
    monkeypatch.setattr(GlobusTransferClient, "list_successful_transfer_items", _list_transfers)
    monkeypatch.setattr(GlobusTransferClient, "delete_endpoint_acl_rule", _delete_acl)

    runner = CliRunner()
    runner.invoke(
        transfer_bridge,
        [
            "uploads",
            "add",
            "--db-path",
            str(db_path),
            "--id",
            "42",
            "--project-id",
            "9",
            "--owner-id",
            "5",
            "--path",
            "/globus/42/9",
            "--acl-id",
            "acl-42",
        ],
    )

    result = runner.invoke(
        transfer_bridge,
        ["monitor", "run", "--once", "--db-path", str(db_path), "--endpoint-id", "ep-1"],
    )
    file_loads = runner.invoke(transfer_bridge, ["uploads", "file-loads", "--db-path", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "handed_off=1" in result.output
    assert deleted_acls == [("ep-1", "acl-42")]
    assert "upload=42" in file_loads.output
