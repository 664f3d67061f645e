"""HTTP client for the Globus Transfer endpoint-manager API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from transfer_bridge.globus.models import (
    TASK_STATUS_SUCCEEDED,
    Task,
    TaskList,
    TransferItem,
    TransferItems,
    TransferServiceError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://transfer.api.globusonline.org/v0.10"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_USER_AGENT = "transfer-bridge/1.0"


class GlobusTransferClient:
    """Thin wrapper over the endpoint-manager task and ACL endpoints."""

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        }
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers=headers,
            transport=transport or httpx.HTTPTransport(retries=max_retries),
        )

    def list_recent_succeeded_tasks(
        self,
        endpoint_id: str,
        *,
        completed_after: str,
        limit: int,
    ) -> TaskList:
        """List succeeded tasks on ``endpoint_id``, oldest completion first."""

        payload = self._request(
            "GET",
            "/endpoint_manager/task_list",
            params={
                "filter_endpoint": endpoint_id,
                "filter_completion_time": completed_after,
                "filter_status": TASK_STATUS_SUCCEEDED,
                "orderby": "completion_time ASC",
                "limit": str(limit),
            },
        )
        return TaskList(
            tasks=[Task.from_payload(item) for item in payload.get("DATA", [])],
            next_token=payload.get("next_token"),
        )

    def list_successful_transfer_items(self, task_id: str, marker: int = 0) -> TransferItems:
        payload = self._request(
            "GET",
            f"/endpoint_manager/task/{task_id}/successful_transfers",
            params={"marker": str(marker)},
        )
        try:
            transfers = [TransferItem.from_payload(item) for item in payload.get("DATA", [])]
        except (AttributeError, TypeError, ValueError) as exc:
            raise TransferServiceError(
                message=f"malformed transfer list for task {task_id}: {exc}",
                code="invalid_response",
            ) from exc
        return TransferItems(transfers=transfers, next_marker=payload.get("next_marker"))

    def delete_endpoint_acl_rule(self, endpoint_id: str, acl_id: str) -> None:
        self._request("DELETE", f"/endpoint/{endpoint_id}/access/{acl_id}")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GlobusTransferClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            response = self._client.request(method, url, params=params)
        except httpx.TimeoutException as exc:
            raise TransferServiceError(
                message=f"timeout calling {method} {url}",
                code="timeout",
            ) from exc
        except httpx.HTTPError as exc:
            raise TransferServiceError(
                message=f"{method} {url} failed: {exc}",
                code="transport_error",
            ) from exc

        if not response.is_success:
            raise _error_from_response(response)
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransferServiceError(
                message=f"{method} {url} returned invalid JSON",
                code="invalid_response",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise TransferServiceError(
                message=f"{method} {url} returned unexpected payload type",
                code="invalid_response",
                status_code=response.status_code,
            )
        return payload


def _error_from_response(response: httpx.Response) -> TransferServiceError:
    """Build an error from the Globus error document, if the body carries one."""

    code = f"http_{response.status_code}"
    message = f"HTTP {response.status_code}"
    request_id: str | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = str(body.get("code") or code)
        message = str(body.get("message") or message)
        request_id = body.get("request_id")
    logger.debug("Transfer service error response: %s", response.text)
    return TransferServiceError(
        message=message,
        code=code,
        status_code=response.status_code,
        request_id=request_id,
    )
