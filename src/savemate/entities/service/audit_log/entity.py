"""Entity: AuditLogEntry."""

from enum import StrEnum
from typing import Any

from pydantic import Field

from src.savemate.entities._base import Entity


class AuditAction(StrEnum):
    DEAL_APPROVE = "DEAL_APPROVE"
    DEAL_REJECT = "DEAL_REJECT"
    DEAL_SET_STATUS = "DEAL_SET_STATUS"
    CATEGORY_CREATE = "CATEGORY_CREATE"
    CATEGORY_UPDATE = "CATEGORY_UPDATE"
    CATEGORY_DELETE = "CATEGORY_DELETE"


class AuditLogEntry(Entity):
    """Append-only record of a state-changing administrative action."""

    actor_id: str
    action: AuditAction
    entity: str = Field(description="Entity type, e.g. 'Deal'")
    entity_id: str
    meta: dict[str, Any] | None = None
