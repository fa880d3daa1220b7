"""AuditLogEntry database table model."""

from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from src.savemate.entities._base import EntityTable


class AuditLogTable(EntityTable, table=True):
    __tablename__ = "audit_log"

    actor_id: str = Field(max_length=64, index=True)
    action: str = Field(max_length=32, index=True)
    entity: str = Field(max_length=32)
    entity_id: str = Field(max_length=64, index=True)
    meta: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
