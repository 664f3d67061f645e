"""Common time helpers."""

from __future__ import annotations

import re
from datetime import UTC, datetime

# Full date-time with seconds and a "Z" or numeric offset.
_RFC3339_PATTERN = re.compile(
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})",
)


def utc_now() -> datetime:
    """Current UTC timestamp."""

    return datetime.now(tz=UTC)


def parse_rfc3339(value: object) -> datetime:
    """Parse an RFC3339 timestamp as returned by the transfer service.

    Raises ``ValueError`` for anything else, including ISO 8601 shapes that
    RFC3339 does not allow (missing seconds, space separator, basic format)
    and non-string values.
    """

    if not isinstance(value, str) or not _RFC3339_PATTERN.fullmatch(value):
        raise ValueError(f"not an RFC3339 timestamp: {value!r}")
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    return datetime.fromisoformat(normalized)
