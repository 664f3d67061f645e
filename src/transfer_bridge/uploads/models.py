"""SQLModel tables and views for globus uploads and file loads."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class GlobusUpload(SQLModel, table=True):
    __tablename__ = "globus_uploads"  # type: ignore[bad-override]

    id: int = Field(primary_key=True)
    project_id: int = Field(index=True)
    owner_id: int = Field(index=True)
    path: str
    globus_acl_id: str | None = None
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


class FileLoad(SQLModel, table=True):
    __tablename__ = "file_loads"  # type: ignore[bad-override]
    __table_args__ = (
        UniqueConstraint("globus_upload_id", name="uq_file_loads_globus_upload_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    globus_upload_id: int = Field(index=True)
    project_id: int = Field(index=True)
    owner_id: int = Field(index=True)
    path: str
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))


@dataclass(slots=True)
class GlobusUploadView:
    id: int
    project_id: int
    owner_id: int
    path: str
    globus_acl_id: str | None
    created_at: datetime


@dataclass(slots=True)
class FileLoadView:
    id: int
    globus_upload_id: int
    project_id: int
    owner_id: int
    path: str
    created_at: datetime
