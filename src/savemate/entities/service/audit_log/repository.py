"""Data-access layer for the audit log.

Only appends and reads; entries are never updated or deleted.
"""

from sqlmodel import Session, select

from src.savemate.entities.service.audit_log.entity import AuditLogEntry
from src.savemate.entities.service.audit_log.table import AuditLogTable


class AuditLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        row = AuditLogTable(
            id=entry.id,
            actor_id=entry.actor_id,
            action=entry.action.value,
            entity=entry.entity,
            entity_id=entry.entity_id,
            meta=entry.meta,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        return AuditLogEntry.model_validate(row, from_attributes=True)

    def list_for_entity(self, entity: str, entity_id: str) -> list[AuditLogEntry]:
        statement = (
            select(AuditLogTable)
            .where(AuditLogTable.entity == entity, AuditLogTable.entity_id == entity_id)
            .order_by(AuditLogTable.created_at, AuditLogTable.id)
        )
        return [
            AuditLogEntry.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]
