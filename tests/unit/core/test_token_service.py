"""Unit tests for token issuing, verification and password reset tokens."""

from datetime import timedelta

import pytest
from authlib.jose import JsonWebToken

from src.savemate.core.errors import Unauthorized
from src.savemate.core.models.identity import KeyClass, Role, TokenPayload
from src.savemate.core.services import TokenService
from src.savemate.core.services.jwt import JwtGeneratorService
from src.savemate.core.storage import InMemoryResetTokenStore
from src.savemate.entities._base import utc_now
from src.savemate.entities.core.user import UserRepository


@pytest.fixture
def payload() -> TokenPayload:
    return TokenPayload(sub="user-1", role=Role.BUSINESS, business_id="biz-1")


class TestIssueAndVerify:
    def test_access_token_round_trip(self, token_service, payload):
        token = token_service.issue_access_token(payload)

        verified = token_service.verify(token, KeyClass.ACCESS)

        assert verified == payload

    def test_business_id_is_optional(self, token_service):
        payload = TokenPayload(sub="user-2", role=Role.USER)

        verified = token_service.verify(
            token_service.issue_access_token(payload), KeyClass.ACCESS
        )

        assert verified.business_id is None

    def test_access_token_is_not_a_refresh_token(self, token_service, payload):
        token = token_service.issue_access_token(payload)

        with pytest.raises(Unauthorized):
            token_service.verify(token, KeyClass.REFRESH)

    def test_refresh_token_is_not_an_access_token(self, token_service, payload):
        token = token_service.issue_refresh_token(payload)

        with pytest.raises(Unauthorized):
            token_service.verify(token, KeyClass.ACCESS)

    def test_tampered_token_is_rejected(self, token_service, payload):
        token = token_service.issue_access_token(payload)
        header, body, signature = token.split(".")
        tampered = ".".join([header, body, signature[::-1]])

        with pytest.raises(Unauthorized):
            token_service.verify(tampered, KeyClass.ACCESS)

    def test_garbage_is_rejected(self, token_service):
        with pytest.raises(Unauthorized):
            token_service.verify("not-a-jwt", KeyClass.ACCESS)

    def test_expired_token_is_rejected(self, config, token_service):
        generator = JwtGeneratorService(config.jwt)
        token = generator.generate_jwt(
            subject="user-1",
            secret=config.jwt.access_secret,
            token_type=KeyClass.ACCESS,
            claims={"role": "USER"},
            expires_in_seconds=-60,
        )

        with pytest.raises(Unauthorized):
            token_service.verify(token, KeyClass.ACCESS)

    def test_unknown_role_is_rejected(self, config, token_service):
        generator = JwtGeneratorService(config.jwt)
        token = generator.generate_jwt(
            subject="user-1",
            secret=config.jwt.access_secret,
            token_type=KeyClass.ACCESS,
            claims={"role": "SUPERUSER"},
        )

        with pytest.raises(Unauthorized, match="payload"):
            token_service.verify(token, KeyClass.ACCESS)

    def test_other_algorithms_are_refused(self, config, token_service):
        jwt = JsonWebToken(["HS512"])
        token = jwt.encode(
            {"alg": "HS512"},
            {"iss": config.jwt.issuer, "sub": "u", "exp": 9999999999, "token_type": "access"},
            config.jwt.access_secret,
        ).decode()

        with pytest.raises(Unauthorized):
            token_service.verify(token, KeyClass.ACCESS)

    def test_claims_cannot_override_registered_claims(self, config, token_service):
        generator = JwtGeneratorService(config.jwt)
        token = generator.generate_access_token("user-1", role="USER", token_type="refresh")

        assert token_service.verify(token, KeyClass.ACCESS).sub == "user-1"


class TestRefresh:
    def test_refresh_keeps_claims(self, token_service, payload):
        pair = token_service.issue_pair(payload)

        refreshed = token_service.refresh(pair.refresh_token)

        assert token_service.verify(refreshed.access_token, KeyClass.ACCESS) == payload
        assert token_service.verify(refreshed.refresh_token, KeyClass.REFRESH) == payload
        assert refreshed.access_token != pair.access_token

    def test_refresh_with_access_token_fails(self, token_service, payload):
        pair = token_service.issue_pair(payload)

        with pytest.raises(Unauthorized):
            token_service.refresh(pair.access_token)


class TestPasswordResetTokens:
    async def test_issue_and_consume(self, token_service, session, plain_user):
        token = await token_service.issue_password_reset_token(
            UserRepository(session), plain_user.email
        )

        assert token is not None
        assert await token_service.consume_password_reset_token(token) == plain_user.id

    async def test_tokens_are_single_use(self, token_service, session, plain_user):
        token = await token_service.issue_password_reset_token(
            UserRepository(session), plain_user.email
        )
        await token_service.consume_password_reset_token(token)

        with pytest.raises(Unauthorized):
            await token_service.consume_password_reset_token(token)

    async def test_unknown_email_yields_no_token(self, token_service, session, reset_store):
        token = await token_service.issue_password_reset_token(
            UserRepository(session), "nobody@savemate.test"
        )

        assert token is None
        assert len(reset_store) == 0

    async def test_unknown_token_is_rejected(self, token_service):
        with pytest.raises(Unauthorized):
            await token_service.consume_password_reset_token("made-up")

    async def test_expired_token_is_rejected(self, config, session, plain_user):
        store = InMemoryResetTokenStore(ttl_seconds=3600)
        current = [utc_now()]
        tokens = TokenService(
            config.jwt, config.password_reset, store, clock=lambda: current[0]
        )
        token = await tokens.issue_password_reset_token(
            UserRepository(session), plain_user.email
        )

        current[0] += timedelta(seconds=config.password_reset.ttl_seconds + 1)

        with pytest.raises(Unauthorized):
            await tokens.consume_password_reset_token(token)
