"""Controllers for upload CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from transfer_bridge.config import Settings
from transfer_bridge.uploads.repository import UploadRepository


@dataclass(slots=True)
class UploadAddCommand:
    """CLI inputs for registering a pending globus upload."""

    db_path: Path | None
    upload_id: int
    project_id: int
    owner_id: int
    path: str
    acl_id: str | None


@dataclass(slots=True)
class UploadListCommand:
    db_path: Path | None


class UploadsCliController:
    """Coordinates upload command execution."""

    def add(self, command: UploadAddCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with upload_repository(settings) as repository:
            upload = repository.add_upload(
                upload_id=command.upload_id,
                project_id=command.project_id,
                owner_id=command.owner_id,
                path=command.path,
                globus_acl_id=command.acl_id,
            )
        return [
            f"Registered globus upload: id={upload.id} project_id={upload.project_id} "
            f"owner_id={upload.owner_id} path={upload.path}",
        ]

    def list_uploads(self, command: UploadListCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with upload_repository(settings) as repository:
            uploads = repository.list_uploads()
        if not uploads:
            return ["No pending globus uploads."]
        return [
            f"{upload.id}\tproject={upload.project_id}\towner={upload.owner_id}\t"
            f"acl={upload.globus_acl_id or '-'}\t{upload.path}"
            for upload in uploads
        ]

    def list_file_loads(self, command: UploadListCommand) -> list[str]:
        settings = Settings.from_env(db_path=command.db_path)
        with upload_repository(settings) as repository:
            file_loads = repository.list_file_loads()
        if not file_loads:
            return ["No file loads."]
        return [
            f"{file_load.id}\tupload={file_load.globus_upload_id}\t"
            f"project={file_load.project_id}\towner={file_load.owner_id}\t{file_load.path}"
            for file_load in file_loads
        ]


@contextmanager
def upload_repository(settings: Settings) -> Iterator[UploadRepository]:
    repository = UploadRepository(settings.db_path)
    repository.init_schema()
    try:
        yield repository
    finally:
        repository.close()
