"""Entity package: AuditLogEntry."""

from .entity import AuditAction, AuditLogEntry
from .repository import AuditLogRepository
from .table import AuditLogTable

__all__ = ["AuditAction", "AuditLogEntry", "AuditLogRepository", "AuditLogTable"]
