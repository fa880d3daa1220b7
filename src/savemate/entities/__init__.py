"""Entities module with hybrid entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model with business logic
- table.py: Database persistence model
- repository.py: Data access layer

Importing this package registers every table on ``SQLModel.metadata``.
"""

from .core.business_profile import (
    BusinessProfile,
    BusinessProfileRepository,
    BusinessProfileTable,
)
from .core.user import User, UserRepository, UserTable
from .service.audit_log import (
    AuditAction,
    AuditLogEntry,
    AuditLogRepository,
    AuditLogTable,
)
from .service.category import Category, CategoryRepository, CategoryTable
from .service.deal import Deal, DealRepository, DealTable, DealTagTable

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditLogRepository",
    "AuditLogTable",
    "BusinessProfile",
    "BusinessProfileRepository",
    "BusinessProfileTable",
    "Category",
    "CategoryRepository",
    "CategoryTable",
    "Deal",
    "DealRepository",
    "DealTable",
    "DealTagTable",
    "User",
    "UserRepository",
    "UserTable",
]
