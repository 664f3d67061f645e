"""CLI entrypoint for transfer-bridge."""

import logging
import os
from pathlib import Path

import rich_click as click

from transfer_bridge import __version__
from transfer_bridge.monitor.controllers import MonitorCliController, MonitorRunCommand
from transfer_bridge.staging.controllers import PathCliController, PathEncodeCommand
from transfer_bridge.uploads.controllers import (
    UploadAddCommand,
    UploadListCommand,
    UploadsCliController,
)

click.rich_click.USE_MARKDOWN = True
MONITOR_CONTROLLER = MonitorCliController()
PATH_CONTROLLER = PathCliController()
UPLOADS_CONTROLLER = UploadsCliController()


@click.group()
@click.version_option(version=__version__, prog_name="transfer-bridge")
def transfer_bridge() -> None:
    """Globus transfer bridge CLI."""

    logging.basicConfig(
        level=os.getenv("TRANSFER_BRIDGE_LOG_LEVEL", "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@transfer_bridge.group()
def monitor() -> None:
    """Globus task monitor commands."""


@monitor.command("run")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option("--endpoint-id", default=None, help="Globus endpoint id to watch.")
@click.option(
    "--interval",
    "poll_interval_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between poll cycles.",
)
@click.option("--once", is_flag=True, default=False, help="Run a single poll cycle and exit.")
def monitor_run(
    db_path: Path | None,
    endpoint_id: str | None,
    poll_interval_seconds: float | None,
    once: bool,
) -> None:
    """Poll globus for finished uploads and turn them into file loads."""

    try:
        lines = MONITOR_CONTROLLER.run(
            MonitorRunCommand(
                db_path=db_path,
                endpoint_id=endpoint_id,
                poll_interval_seconds=poll_interval_seconds,
                once=once,
            ),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@transfer_bridge.group()
def path() -> None:
    """Staging path commands."""


@path.command("decode")
@click.argument("staging_path")
def path_decode(staging_path: str) -> None:
    """Show the category, tenant, project and relative path of a staging path."""

    _emit_lines(PATH_CONTROLLER.decode(staging_path))


@path.command("encode")
@click.option("--category", required=True, help="Transfer category, for example globus.")
@click.option("--tenant-id", type=int, required=True, help="Owning user id.")
@click.option("--project-id", type=int, required=True, help="Owning project id.")
@click.option("--relative-path", default="/", show_default=True, help="Path below the scope.")
@click.option("--suffix", default="", help="File name appended to the relative path.")
@click.option("--scope-only", is_flag=True, default=False, help="Print only the scope path.")
def path_encode(  # noqa: PLR0913
    category: str,
    tenant_id: int,
    project_id: int,
    relative_path: str,
    suffix: str,
    scope_only: bool,
) -> None:
    """Build a staging path from its parts."""

    try:
        lines = PATH_CONTROLLER.encode(
            PathEncodeCommand(
                category=category,
                tenant_id=tenant_id,
                project_id=project_id,
                relative_path=relative_path,
                suffix=suffix,
                scope_only=scope_only,
            ),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@transfer_bridge.group()
def uploads() -> None:
    """Globus upload and file load commands."""


@uploads.command("add")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
@click.option("--id", "upload_id", type=click.IntRange(min=1), required=True, help="Upload id.")
@click.option("--project-id", type=int, required=True, help="Owning project id.")
@click.option("--owner-id", type=int, required=True, help="Owning user id.")
@click.option("--path", "upload_path", required=True, help="Staging directory of the upload.")
@click.option("--acl-id", default=None, help="Globus ACL rule granting write access.")
def uploads_add(  # noqa: PLR0913
    db_path: Path | None,
    upload_id: int,
    project_id: int,
    owner_id: int,
    upload_path: str,
    acl_id: str | None,
) -> None:
    """Register a pending globus upload."""

    try:
        lines = UPLOADS_CONTROLLER.add(
            UploadAddCommand(
                db_path=db_path,
                upload_id=upload_id,
                project_id=project_id,
                owner_id=owner_id,
                path=upload_path,
                acl_id=acl_id,
            ),
        )
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@uploads.command("list")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
def uploads_list(db_path: Path | None) -> None:
    """List pending globus uploads."""

    _emit_lines(UPLOADS_CONTROLLER.list_uploads(UploadListCommand(db_path=db_path)))


@uploads.command("file-loads")
@click.option("--db-path", type=click.Path(path_type=Path), default=None, help="SQLite DB path.")
def uploads_file_loads(db_path: Path | None) -> None:
    """List file loads created from finished uploads."""

    _emit_lines(UPLOADS_CONTROLLER.list_file_loads(UploadListCommand(db_path=db_path)))


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    transfer_bridge()
