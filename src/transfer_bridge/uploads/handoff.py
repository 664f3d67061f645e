"""Downstream hand-off of finished globus uploads to the file loader."""

from __future__ import annotations

import logging
from typing import Protocol

from transfer_bridge.globus.models import TransferServiceError
from transfer_bridge.staging.path_context import parse_id
from transfer_bridge.uploads.models import FileLoadView
from transfer_bridge.uploads.repository import UploadRepository

logger = logging.getLogger(__name__)


class UploadReadyHandler(Protocol):
    """Receives routing ids whose staged files have all been uploaded.

    Implementations must be idempotent: the same routing id can arrive more
    than once, for example after a monitor restart.
    """

    def on_upload_ready(self, routing_id: str) -> None:
        raise NotImplementedError


class EndpointAclClient(Protocol):
    def delete_endpoint_acl_rule(self, endpoint_id: str, acl_id: str) -> None:
        raise NotImplementedError


class FileLoadHandoff:
    """Closes the upload directory and queues it for the file loader."""

    def __init__(
        self,
        *,
        repository: UploadRepository,
        acl_client: EndpointAclClient | None = None,
        endpoint_id: str | None = None,
    ) -> None:
        if acl_client is not None and not endpoint_id:
            raise ValueError("endpoint_id is required when an ACL client is configured.")
        self.repository = repository
        self.acl_client = acl_client
        self.endpoint_id = endpoint_id

    def on_upload_ready(self, routing_id: str) -> None:
        self.create_file_load(routing_id)

    def create_file_load(self, routing_id: str) -> FileLoadView | None:
        upload_id = parse_id(routing_id)
        if upload_id is None:
            logger.warning("Ignoring non-numeric globus upload id %r", routing_id)
            return None

        upload = self.repository.get_upload(upload_id)
        if upload is None:
            # Converted to a file load by an earlier notification.
            logger.info("No pending globus upload %s, nothing to load", upload_id)
            return None

        if self.acl_client is not None and self.endpoint_id and upload.globus_acl_id:
            try:
                self.acl_client.delete_endpoint_acl_rule(self.endpoint_id, upload.globus_acl_id)
            except TransferServiceError as error:
                logger.warning("Unable to delete ACL %s: %s", upload.globus_acl_id, error)

        file_load = self.repository.convert_upload_to_file_load(upload_id)
        if file_load is not None:
            logger.info("Created file load (id: %s) for globus upload %s", file_load.id, upload_id)
        return file_load
