"""Request authorization: bearer token to identity, then role checks.

Ownership of individual entities is checked by the services that load them.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from src.savemate.core.errors import Forbidden, Unauthorized
from src.savemate.core.models.identity import Identity, KeyClass, Role
from src.savemate.core.services.token_service import TokenService
from src.savemate.entities.core.business_profile import BusinessProfileRepository

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Missing access token")
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Missing access token")
    return token


class AuthorizationGuard:
    def __init__(self, token_service: TokenService) -> None:
        self._tokens = token_service

    def require_identity(self, token: str | None) -> Identity:
        if not token:
            raise Unauthorized("Missing access token")
        payload = self._tokens.verify(token, KeyClass.ACCESS)
        return Identity.from_payload(payload)

    def require_role(
        self,
        identity: Identity,
        allowed_roles: Iterable[Role],
        profiles: BusinessProfileRepository | None = None,
    ) -> Identity:
        """Check the caller's role and resolve the business profile when needed.

        A BUSINESS caller whose token carries no ``businessId`` (for example one
        minted before the profile existed) gets exactly one profile lookup. The
        returned identity carries the id; the input identity and the token are
        left untouched.

        Raises:
            Forbidden: Role not allowed, or no business profile exists.
        """
        allowed = frozenset(allowed_roles)
        if identity.role not in allowed:
            raise Forbidden("Insufficient role")

        if (
            Role.BUSINESS in allowed
            and identity.role is Role.BUSINESS
            and not identity.business_id
        ):
            if profiles is None:
                raise Forbidden("Business profile missing")
            profile = profiles.get_by_user_id(identity.user_id)
            if profile is None:
                logger.info("User {} has no business profile", identity.user_id)
                raise Forbidden("Business profile missing")
            return identity.with_business(profile.id)

        return identity
