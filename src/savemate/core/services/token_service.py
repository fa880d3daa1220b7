"""Access/refresh token pairs and one-time password reset tokens."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from src.savemate.core.errors import Unauthorized
from src.savemate.core.models.identity import KeyClass, TokenPair, TokenPayload
from src.savemate.core.security import generate_secure_token
from src.savemate.core.services.jwt import JwtGeneratorService, JwtVerificationService
from src.savemate.core.storage.reset_token_storage import ResetTokenRecord, ResetTokenStore
from src.savemate.entities._base import utc_now
from src.savemate.entities.core.user import UserRepository
from src.savemate.runtime.config.config_data import JWTConfig, PasswordResetConfig


class TokenService:
    """Issues and verifies credentials.

    Access and refresh tokens are signed with different secrets, so holding
    one kind never lets a caller forge the other.
    """

    def __init__(
        self,
        jwt_config: JWTConfig,
        reset_config: PasswordResetConfig,
        reset_store: ResetTokenStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._reset_config = reset_config
        self._reset_store = reset_store
        self._clock = clock
        self._generator = JwtGeneratorService(jwt_config)
        self._verifier = JwtVerificationService(jwt_config)

    def issue_access_token(self, payload: TokenPayload) -> str:
        return self._generator.generate_access_token(payload.sub, **payload.to_claims())

    def issue_refresh_token(self, payload: TokenPayload) -> str:
        return self._generator.generate_refresh_token(payload.sub, **payload.to_claims())

    def issue_pair(self, payload: TokenPayload) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(payload),
            refresh_token=self.issue_refresh_token(payload),
        )

    def verify(self, token: str, key_class: KeyClass) -> TokenPayload:
        """Return the payload of a valid token of the given class.

        Raises:
            Unauthorized: Bad signature, expired, wrong class, or a payload
                without a subject and a known role.
        """
        claims = self._verifier.verify_jwt(token, key_class)
        try:
            return TokenPayload.model_validate(claims)
        except PydanticValidationError as e:
            raise Unauthorized("Invalid token payload") from e

    def refresh(self, refresh_token: str) -> TokenPair:
        """Mint a new pair carrying the same subject, role and business id.

        The presented refresh token stays valid until it expires.
        """
        payload = self.verify(refresh_token, KeyClass.REFRESH)
        return self.issue_pair(payload)

    async def issue_password_reset_token(
        self, users: UserRepository, email: str
    ) -> str | None:
        """Create a reset token for ``email``; None when no such user exists."""
        user = users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown account")
            return None

        token = generate_secure_token(32)
        ttl = self._reset_config.ttl_seconds
        record = ResetTokenRecord(
            user_id=user.id, expires_at=self._clock() + timedelta(seconds=ttl)
        )
        await self._reset_store.put(token, record, ttl)
        logger.info("Password reset token issued for user {}", user.id)
        return token

    async def consume_password_reset_token(self, token: str) -> str:
        """Take the token out of the store and return its user id.

        Raises:
            Unauthorized: Token unknown, already used, or expired.
        """
        record = await self._reset_store.take(token)
        if record is None or record.is_expired(self._clock()):
            raise Unauthorized("Invalid or expired reset token")
        logger.info("Password reset token consumed for user {}", record.user_id)
        return record.user_id
