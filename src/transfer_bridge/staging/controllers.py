"""Controllers for staging path CLI commands."""

from __future__ import annotations

from dataclasses import dataclass

from transfer_bridge.staging.path_context import TransferPathContext, decode_path


@dataclass(slots=True)
class PathEncodeCommand:
    category: str
    tenant_id: int
    project_id: int
    relative_path: str
    suffix: str
    scope_only: bool


class PathCliController:
    def decode(self, path: str) -> list[str]:
        context = decode_path(path)
        if context.is_root:
            scope = "root"
        elif context.is_project and context.is_tenant:
            scope = "project"
        elif context.is_tenant:
            scope = "tenant"
        else:
            scope = "category"
        return [
            f"category={context.category!r}",
            f"tenant_id={context.tenant_id}",
            f"project_id={context.project_id}",
            f"relative_path={context.relative_path!r}",
            f"scope={scope}",
        ]

    def encode(self, command: PathEncodeCommand) -> list[str]:
        if not command.category:
            raise ValueError("A category is required to encode a staging path.")
        context = TransferPathContext(
            category=command.category,
            tenant_id=command.tenant_id,
            project_id=command.project_id,
            relative_path=command.relative_path,
        )
        if command.scope_only:
            return [context.scope_path()]
        return [context.full_path(command.suffix)]
