"""SQLModel-backed store for globus uploads and file loads."""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel, col, create_engine, select

from transfer_bridge.common import utc_now
from transfer_bridge.uploads.models import (
    FileLoad,
    FileLoadView,
    GlobusUpload,
    GlobusUploadView,
)

logger = logging.getLogger(__name__)
DEFAULT_BUSY_TIMEOUT_MS = 5000


class UploadRepository:
    """Persists globus upload requests and the file loads created from them."""

    def __init__(self, db_path: Path, *, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
        self.db_path = db_path
        self.engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={
                "check_same_thread": False,
                "timeout": max(1.0, busy_timeout_ms / 1000.0),
            },
            poolclass=NullPool,
        )
        event.listen(self.engine, "connect", _enable_wal)

    def init_schema(self) -> None:
        SQLModel.metadata.create_all(
            self.engine,
            tables=[GlobusUpload.__table__, FileLoad.__table__],  # type: ignore[attr-defined]
        )

    def close(self) -> None:
        self.engine.dispose()

    def add_upload(
        self,
        *,
        upload_id: int,
        project_id: int,
        owner_id: int,
        path: str,
        globus_acl_id: str | None = None,
    ) -> GlobusUploadView:
        row = GlobusUpload(
            id=upload_id,
            project_id=project_id,
            owner_id=owner_id,
            path=path,
            globus_acl_id=globus_acl_id,
            created_at=utc_now(),
        )
        with Session(self.engine) as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as error:
                session.rollback()
                raise ValueError(f"Globus upload {upload_id} already exists.") from error
            session.refresh(row)
            return _upload_view(row)

    def get_upload(self, upload_id: int) -> GlobusUploadView | None:
        with Session(self.engine) as session:
            row = session.get(GlobusUpload, upload_id)
            return _upload_view(row) if row is not None else None

    def list_uploads(self) -> list[GlobusUploadView]:
        with Session(self.engine) as session:
            rows = session.exec(select(GlobusUpload).order_by(col(GlobusUpload.id))).all()
            return [_upload_view(row) for row in rows]

    def list_file_loads(self) -> list[FileLoadView]:
        with Session(self.engine) as session:
            rows = session.exec(select(FileLoad).order_by(col(FileLoad.id))).all()
            return [_file_load_view(row) for row in rows]

    def convert_upload_to_file_load(self, upload_id: int) -> FileLoadView | None:
        """Turn a pending upload into a file load and drop the upload row.

        Returns ``None`` when the upload no longer exists, which means it was
        converted earlier.
        """

        with Session(self.engine) as session:
            upload = session.get(GlobusUpload, upload_id)
            if upload is None:
                return None

            file_load = session.exec(
                select(FileLoad).where(FileLoad.globus_upload_id == upload_id),
            ).one_or_none()
            if file_load is None:
                file_load = FileLoad(
                    globus_upload_id=upload.id,
                    project_id=upload.project_id,
                    owner_id=upload.owner_id,
                    path=upload.path,
                    created_at=utc_now(),
                )
                session.add(file_load)
            else:
                logger.info(
                    "File load %s already exists for globus upload %s",
                    file_load.id,
                    upload_id,
                )

            session.delete(upload)
            session.commit()
            session.refresh(file_load)
            return _file_load_view(file_load)


def _enable_wal(dbapi_connection: sqlite3.Connection, _connection_record: object) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.close()


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on read.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _upload_view(row: GlobusUpload) -> GlobusUploadView:
    return GlobusUploadView(
        id=row.id,
        project_id=row.project_id,
        owner_id=row.owner_id,
        path=row.path,
        globus_acl_id=row.globus_acl_id,
        created_at=_as_utc(row.created_at),
    )


def _file_load_view(row: FileLoad) -> FileLoadView:
    if row.id is None:
        raise RuntimeError("File load row has no id after commit.")
    return FileLoadView(
        id=row.id,
        globus_upload_id=row.globus_upload_id,
        project_id=row.project_id,
        owner_id=row.owner_id,
        path=row.path,
        created_at=_as_utc(row.created_at),
    )
