"""Application services."""

from .auth_service import AuthService
from .authorization import AuthorizationGuard, extract_bearer_token
from .categories import CategoryService
from .database.db_session import DbSessionService
from .deals import BusinessDealService, CatalogService
from .jwt import JwtGeneratorService, JwtVerificationService
from .moderation import (
    AuditSink,
    DatabaseAuditSink,
    ModerationResult,
    ModerationService,
)
from .token_service import TokenService

__all__ = [
    "AuditSink",
    "AuthService",
    "AuthorizationGuard",
    "BusinessDealService",
    "CatalogService",
    "CategoryService",
    "DatabaseAuditSink",
    "DbSessionService",
    "JwtGeneratorService",
    "JwtVerificationService",
    "ModerationResult",
    "ModerationService",
    "TokenService",
    "extract_bearer_token",
]
