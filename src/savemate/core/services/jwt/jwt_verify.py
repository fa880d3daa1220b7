"""JWT verification service."""

import time

from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.savemate.core.errors import Unauthorized
from src.savemate.core.models.identity import KeyClass
from src.savemate.runtime.config.config_data import JWTConfig


class JwtVerificationService:
    def __init__(self, config: JWTConfig):
        self._config = config
        # Only the configured algorithm is accepted, which rules out "none" and alg swaps
        self._jwt = JsonWebToken([config.algorithm])

    def _secret_for(self, key_class: KeyClass) -> str:
        if key_class is KeyClass.ACCESS:
            return self._config.access_secret
        return self._config.refresh_secret

    def verify_jwt(self, token: str, key_class: KeyClass) -> dict:
        """Verify signature, registered claims and token class.

        Returns:
            The verified claims

        Raises:
            Unauthorized: For any signature, expiry, issuer or shape problem
        """
        if not token:
            raise Unauthorized("Missing token")

        claims_options = {
            "iss": {"essential": True, "value": self._config.issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }
        try:
            claims = self._jwt.decode(
                token, self._secret_for(key_class), claims_options=claims_options
            )
            claims.validate(leeway=self._config.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Rejected {} token: {}", key_class.value, exc)
            raise Unauthorized("Invalid or expired token") from exc

        # extra temporal sanity
        now = int(time.time())
        iat = claims.get("iat")
        if iat is not None and int(iat) > now + self._config.clock_skew:
            raise Unauthorized("Invalid or expired token")

        if claims.get("token_type") != key_class.value:
            raise Unauthorized("Invalid or expired token")

        return dict(claims)
