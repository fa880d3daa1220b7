"""Append-only audit sink.

Audit writes are best effort: a failed write is logged and reported to the
caller, but it never undoes the action that was being audited.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlmodel import Session

from src.savemate.entities.service.audit_log import (
    AuditAction,
    AuditLogEntry,
    AuditLogRepository,
)


class AuditSink(ABC):
    @abstractmethod
    def record(self, entry: AuditLogEntry) -> None:
        """Persist ``entry`` or raise."""


class DatabaseAuditSink(AuditSink):
    """Writes entries to the ``audit_log`` table in their own commit."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._entries = AuditLogRepository(session)

    def record(self, entry: AuditLogEntry) -> None:
        try:
            self._entries.append(entry)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise


@dataclass(frozen=True)
class AuditOutcome:
    recorded: bool
    error: str | None = None


def write_audit(
    sink: AuditSink,
    actor_id: str,
    action: AuditAction,
    entity: str,
    entity_id: str,
    meta: dict[str, Any] | None = None,
) -> AuditOutcome:
    """Record one audit entry, turning a failure into an ``AuditOutcome``."""
    entry = AuditLogEntry(
        actor_id=actor_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        meta=meta,
    )
    try:
        sink.record(entry)
    except Exception as e:
        logger.exception(
            "Audit write failed for {} on {} {}", action.value, entity, entity_id
        )
        return AuditOutcome(recorded=False, error=f"{type(e).__name__}: {e}")
    return AuditOutcome(recorded=True)
