"""Staging path codec."""

from transfer_bridge.staging.path_context import (
    TransferPathContext,
    decode_path,
    join_path,
    parse_id,
)

__all__ = [
    "TransferPathContext",
    "decode_path",
    "join_path",
    "parse_id",
]
