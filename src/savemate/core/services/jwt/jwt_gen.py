import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.savemate.core.errors import Internal
from src.savemate.core.models.identity import KeyClass
from src.savemate.runtime.config.config_data import JWTConfig

RESERVED_CLAIMS = frozenset({"iss", "sub", "exp", "iat", "nbf", "jti", "token_type"})


class JwtGeneratorService:
    """Service for generating the HMAC-signed tokens used by the API."""

    def __init__(self, config: JWTConfig):
        self._config = config
        self._jwt = JsonWebToken([config.algorithm])

    def generate_jwt(
        self,
        subject: str,
        secret: str,
        token_type: KeyClass,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int = 900,
        include_jti: bool = True,
    ) -> str:
        """Generate a signed JWT using authlib.

        Args:
            subject: Subject (sub) claim, the user id
            secret: HMAC secret for this token class
            token_type: Written to the ``token_type`` claim so an access token
                can never be accepted where a refresh token is expected
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime in seconds
            include_jti: Whether to include a unique JWT ID claim (default: True)

        Returns:
            Signed JWT token string

        Raises:
            Internal: If the secret is missing or encoding fails
        """
        if not secret:
            raise Internal("JWT signing secret not configured")

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": self._config.issuer,
            "sub": subject,
            "iat": now,
            "exp": now + expires_in_seconds,
            "token_type": token_type.value,
        }

        # Unique JWT ID so that two pairs minted in the same second still differ
        if include_jti:
            payload["jti"] = generate_token(16)

        if claims:
            payload.update({k: v for k, v in claims.items() if k not in RESERVED_CLAIMS})

        try:
            header = {"alg": self._config.algorithm, "typ": "JWT"}
            token = self._jwt.encode(header, payload, secret)
            return token.decode() if isinstance(token, bytes) else token
        except JoseError as e:
            logger.error("JWT encoding failed: {}", e)
            raise Internal("Failed to generate token") from e

    def generate_access_token(self, user_id: str, **claims: Any) -> str:
        return self.generate_jwt(
            subject=user_id,
            secret=self._config.access_secret,
            token_type=KeyClass.ACCESS,
            claims=claims,
            expires_in_seconds=self._config.access_ttl_seconds,
        )

    def generate_refresh_token(self, user_id: str, **claims: Any) -> str:
        return self.generate_jwt(
            subject=user_id,
            secret=self._config.refresh_secret,
            token_type=KeyClass.REFRESH,
            claims=claims,
            expires_in_seconds=self._config.refresh_ttl_seconds,
        )
