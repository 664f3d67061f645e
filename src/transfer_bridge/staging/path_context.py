"""Positional codec for staging paths.

Staging paths carry their routing scope positionally::

    /<category>/<tenant_id>/<project_id>/<relative path...>

Decoding is deliberately permissive: short or malformed paths degrade to
zero/empty fields and callers inspect the ``is_*`` predicates instead of
catching errors.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass

_MAX_PIECES = 5
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(slots=True, frozen=True)
class TransferPathContext:
    """Logical address of a staged transfer."""

    category: str = ""
    tenant_id: int = 0
    project_id: int = 0
    relative_path: str = ""

    @classmethod
    def from_path(cls, path: str) -> TransferPathContext:
        return decode_path(path)

    @property
    def is_root(self) -> bool:
        return self.category == ""

    @property
    def is_category(self) -> bool:
        return self.category != ""

    @property
    def is_tenant(self) -> bool:
        return self.tenant_id != 0

    @property
    def is_project(self) -> bool:
        return self.project_id != 0

    def scope_path(self) -> str:
        """Root staging directory of the tenant/project, e.g. ``/globus/5/9``."""

        return join_path("/", self.category, f"{self.tenant_id}/{self.project_id}")

    def full_path(self, suffix: str = "") -> str:
        """Staging path of ``suffix`` below this context's relative path."""

        return join_path(self.scope_path(), self.relative_path, suffix)

    def file_path(self, name: str) -> str:
        """Path of ``name`` relative to the project scope."""

        return join_path(self.relative_path, name)


def decode_path(path: str) -> TransferPathContext:
    """Decode a staging path into its positional parts. Never raises."""

    pieces = path.split("/", _MAX_PIECES - 1)

    category = pieces[1] if len(pieces) > 1 else ""
    if not category:
        return TransferPathContext()

    tenant_id = _parse_id(pieces[2]) if len(pieces) > 2 else 0
    project_id = _parse_id(pieces[3]) if len(pieces) > 3 else 0

    relative_path = ""
    if tenant_id != 0 and project_id != 0:
        relative_path = "/"
    if len(pieces) == _MAX_PIECES:
        relative_path = join_path("/", pieces[4])

    return TransferPathContext(
        category=category,
        tenant_id=tenant_id,
        project_id=project_id,
        relative_path=relative_path,
    )


def join_path(*elements: str) -> str:
    """Join path elements, dropping empty ones and collapsing separators.

    ``..`` segments are resolved lexically; no traversal check is applied.
    """

    joined = "/".join(element for element in elements if element)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    # normpath keeps a leading "//" as implementation defined.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def parse_id(value: str) -> int | None:
    """Parse an optionally signed ASCII decimal id, ``None`` if it is not one."""

    if not _INT_PATTERN.fullmatch(value):
        return None
    return int(value)


def _parse_id(value: str) -> int:
    parsed = parse_id(value)
    return parsed if parsed is not None else 0
