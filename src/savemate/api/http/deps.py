"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime

from fastapi import Depends, Query, Request, Response
from pydantic import ValidationError as PydanticValidationError
from sqlmodel import Session

from src.savemate.api.http.app_data import ApplicationDependencies
from src.savemate.api.http.errors import validation_error_from
from src.savemate.core.models.catalog import DealSort, DealStatus, Voivodeship
from src.savemate.core.models.deals import DealQuery
from src.savemate.core.models.identity import Identity, Role
from src.savemate.core.services import (
    AuthorizationGuard,
    AuthService,
    BusinessDealService,
    CatalogService,
    CategoryService,
    ModerationService,
    TokenService,
    extract_bearer_token,
)
from src.savemate.entities.core.business_profile import BusinessProfileRepository
from src.savemate.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_app_config(
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> ConfigData:
    return deps.config


def get_db_session(
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> Iterator[Session]:
    """One session per request, closed once the response is sent."""
    session = deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_token_service(
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> TokenService:
    return deps.token_service


def get_authorization_guard(
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> AuthorizationGuard:
    return deps.authorization_guard


async def enforce_rate_limit(
    request: Request,
    response: Response,
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> None:
    if deps.rate_limiter is not None:
        await deps.rate_limiter(request, response)


def get_auth_service(
    db: Session = Depends(get_db_session),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)


def get_catalog_service(
    db: Session = Depends(get_db_session),
    config: ConfigData = Depends(get_app_config),
) -> CatalogService:
    return CatalogService(db, hide_expired=config.catalog.hide_expired)


def get_business_deal_service(
    db: Session = Depends(get_db_session),
    deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> BusinessDealService:
    return BusinessDealService(
        db, deps.blob_store, hide_expired=deps.config.catalog.hide_expired
    )


def get_moderation_service(
    db: Session = Depends(get_db_session),
    config: ConfigData = Depends(get_app_config),
) -> ModerationService:
    return ModerationService(db, hide_expired=config.catalog.hide_expired)


def get_category_service(db: Session = Depends(get_db_session)) -> CategoryService:
    return CategoryService(db)


def get_identity(
    request: Request,
    guard: AuthorizationGuard = Depends(get_authorization_guard),
) -> Identity:
    """Authenticate the request from its ``Authorization: Bearer`` header."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    identity = guard.require_identity(token)
    request.state.uid = identity.user_id
    return identity


def require_roles(*roles: Role) -> Callable[..., Identity]:
    """Create a dependency admitting only ``roles``.

    BUSINESS callers come out with ``business_id`` resolved.
    """

    def dep(
        identity: Identity = Depends(get_identity),
        guard: AuthorizationGuard = Depends(get_authorization_guard),
        db: Session = Depends(get_db_session),
    ) -> Identity:
        return guard.require_role(identity, roles, BusinessProfileRepository(db))

    return dep


require_admin = require_roles(Role.ADMIN)
require_business = require_roles(Role.BUSINESS)


def get_deal_query(
    category_id: str | None = Query(default=None, alias="categoryId"),
    city: str | None = Query(default=None),
    voivodeship: Voivodeship | None = Query(default=None),
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
    discount_min: int | None = Query(default=None, alias="discountMin"),
    tags: list[str] | None = Query(default=None),
    q: str | None = Query(default=None),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: datetime | None = Query(default=None, alias="dateTo"),
    sort: DealSort = Query(default=DealSort.NEWEST),
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    status: DealStatus | None = Query(default=None),
    config: ConfigData = Depends(get_app_config),
) -> DealQuery:
    """Collect listing parameters into a ``DealQuery``.

    Bounds are checked by the model so that every listing reports them the
    same way.
    """
    raw = {
        "category_id": category_id,
        "city": city,
        "voivodeship": voivodeship,
        "min_price": min_price,
        "max_price": max_price,
        "discount_min": discount_min,
        "tags": tags,
        "q": q,
        "date_from": date_from,
        "date_to": date_to,
        "sort": sort,
        "page": page,
        "limit": limit if limit is not None else config.catalog.default_limit,
        "status": status,
    }
    try:
        query = DealQuery.model_validate(raw)
    except PydanticValidationError as e:
        raise validation_error_from(e.errors()) from e
    if query.limit > config.catalog.max_limit:
        raise validation_error_from(
            [{"loc": ("limit",), "msg": f"Limit must be at most {config.catalog.max_limit}"}]
        )
    return query
