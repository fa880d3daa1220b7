"""Unit tests for registration, login, refresh and password reset."""

import pytest

from src.savemate.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from src.savemate.core.models.identity import Identity, KeyClass, Role
from src.savemate.core.services import AuthService
from src.savemate.entities.core.business_profile import BusinessProfileRepository
from src.savemate.entities.core.user import UserRepository

# 60 characters but 96 bytes in UTF-8
MULTIBYTE_PASSWORD = "zażółćgęśląjaźń" * 4


@pytest.fixture
def auth(session, token_service) -> AuthService:
    return AuthService(session, token_service)


class TestRegister:
    def test_registers_user(self, auth, token_service, session):
        pair = auth.register("new@savemate.test", "long-enough-pw")

        payload = token_service.verify(pair.access_token, KeyClass.ACCESS)
        assert payload.role is Role.USER
        assert payload.business_id is None
        assert UserRepository(session).get(payload.sub).email == "new@savemate.test"

    def test_business_gets_profile_and_claim(self, auth, token_service, session):
        pair = auth.register("biz@savemate.test", "long-enough-pw", Role.BUSINESS)

        payload = token_service.verify(pair.access_token, KeyClass.ACCESS)
        profile = BusinessProfileRepository(session).get_by_user_id(payload.sub)
        assert profile is not None
        assert payload.business_id == profile.id

    def test_admin_cannot_self_register(self, auth):
        with pytest.raises(ValidationError) as exc_info:
            auth.register("boss@savemate.test", "long-enough-pw", Role.ADMIN)

        assert "role" in exc_info.value.details["fieldErrors"]

    def test_duplicate_email_conflicts(self, auth, plain_user):
        with pytest.raises(Conflict):
            auth.register(plain_user.email.upper(), "long-enough-pw")

    def test_password_is_hashed(self, auth, session):
        auth.register("hash@savemate.test", "long-enough-pw")

        user = UserRepository(session).get_by_email("hash@savemate.test")
        assert user.password_hash != "long-enough-pw"
        assert user.password_hash.startswith("$2")

    def test_multibyte_password_over_bcrypt_limit(self, auth, session):
        with pytest.raises(ValidationError) as exc_info:
            auth.register("polish@savemate.test", MULTIBYTE_PASSWORD)

        assert "password" in exc_info.value.details["fieldErrors"]
        assert UserRepository(session).get_by_email("polish@savemate.test") is None

    def test_multibyte_password_within_limit(self, auth):
        pair = auth.register("polish@savemate.test", "zażółćgęśl" * 3)

        assert pair.access_token


class TestLogin:
    def test_login(self, auth, token_service, plain_user, password):
        pair = auth.login(plain_user.email, password)

        assert token_service.verify(pair.access_token, KeyClass.ACCESS).sub == plain_user.id

    def test_email_is_case_insensitive(self, auth, plain_user, password):
        auth.login(plain_user.email.upper(), password)

    def test_wrong_password(self, auth, plain_user):
        with pytest.raises(Unauthorized, match="Invalid credentials"):
            auth.login(plain_user.email, "wrong-password")

    def test_unknown_email_reads_the_same(self, auth):
        with pytest.raises(Unauthorized, match="Invalid credentials"):
            auth.login("ghost@savemate.test", "whatever-pw")

    def test_business_login_carries_business_id(
        self, auth, token_service, business_user, business_profile, password
    ):
        pair = auth.login(business_user.email, password)

        payload = token_service.verify(pair.access_token, KeyClass.ACCESS)
        assert payload.business_id == business_profile.id


class TestRefresh:
    def test_missing_token(self, auth):
        with pytest.raises(Unauthorized):
            auth.refresh(None)

    def test_rotates_pair(self, auth, token_service, plain_user, password):
        pair = auth.login(plain_user.email, password)

        refreshed = auth.refresh(pair.refresh_token)

        assert token_service.verify(refreshed.access_token, KeyClass.ACCESS).sub == plain_user.id


class TestPasswordReset:
    async def test_full_reset_flow(self, auth, plain_user, password):
        token = await auth.forgot_password(plain_user.email)

        await auth.reset_password(token, "brand-new-password")

        auth.login(plain_user.email, "brand-new-password")
        with pytest.raises(Unauthorized):
            auth.login(plain_user.email, password)

    async def test_token_cannot_be_reused(self, auth, plain_user):
        token = await auth.forgot_password(plain_user.email)
        await auth.reset_password(token, "brand-new-password")

        with pytest.raises(Unauthorized):
            await auth.reset_password(token, "another-password")

    async def test_short_password_is_refused_before_consuming(self, auth, plain_user):
        token = await auth.forgot_password(plain_user.email)

        with pytest.raises(ValidationError):
            await auth.reset_password(token, "short")

        # the token survives a validation failure
        await auth.reset_password(token, "long-enough-now")

    async def test_oversized_multibyte_password_keeps_token(self, auth, plain_user):
        token = await auth.forgot_password(plain_user.email)

        with pytest.raises(ValidationError) as exc_info:
            await auth.reset_password(token, MULTIBYTE_PASSWORD)

        assert "newPassword" in exc_info.value.details["fieldErrors"]
        await auth.reset_password(token, "long-enough-now")

    async def test_unknown_email(self, auth):
        assert await auth.forgot_password("nobody@savemate.test") is None


class TestMe:
    def test_user(self, auth, plain_user):
        user, business_id = auth.me(Identity(user_id=plain_user.id, role=Role.USER))

        assert user.email == plain_user.email
        assert business_id is None

    def test_business_id_from_profile(self, auth, business_user, business_profile):
        _, business_id = auth.me(Identity(user_id=business_user.id, role=Role.BUSINESS))

        assert business_id == business_profile.id

    def test_deleted_user(self, auth):
        with pytest.raises(NotFound):
            auth.me(Identity(user_id="missing", role=Role.USER))
