from dataclasses import dataclass

from src.savemate.api.http.middleware.limiter import (
    DefaultLocalRateLimiter,
    create_rate_limiter,
)
from src.savemate.core.services import (
    AuthorizationGuard,
    DbSessionService,
    TokenService,
)
from src.savemate.core.storage import (
    BlobStore,
    LocalBlobStore,
    ResetTokenStore,
    create_reset_token_store,
)
from src.savemate.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
    reset_token_store: ResetTokenStore
    token_service: TokenService
    authorization_guard: AuthorizationGuard
    blob_store: BlobStore
    rate_limiter: DefaultLocalRateLimiter | None = None


def build_dependencies(
    config: ConfigData,
    database_service: DbSessionService | None = None,
    reset_token_store: ResetTokenStore | None = None,
    blob_store: BlobStore | None = None,
) -> ApplicationDependencies:
    """Wire the process-wide services from one configuration.

    Tests pass their own database service, reset token store or blob store.
    """
    reset_store = reset_token_store or create_reset_token_store(
        config.password_reset, config.redis
    )
    token_service = TokenService(config.jwt, config.password_reset, reset_store)
    return ApplicationDependencies(
        config=config,
        database_service=database_service or DbSessionService(config),
        reset_token_store=reset_store,
        token_service=token_service,
        authorization_guard=AuthorizationGuard(token_service),
        blob_store=blob_store
        or LocalBlobStore(
            config.uploads.directory,
            config.uploads.public_prefix,
            config.uploads.max_bytes,
        ),
        rate_limiter=create_rate_limiter(config.rate_limiter),
    )
