"""Deal moderation and its audit trail."""

from .audit import AuditOutcome, AuditSink, DatabaseAuditSink, write_audit
from .moderation_service import ModerationResult, ModerationService

__all__ = [
    "AuditOutcome",
    "AuditSink",
    "DatabaseAuditSink",
    "ModerationResult",
    "ModerationService",
    "write_audit",
]
