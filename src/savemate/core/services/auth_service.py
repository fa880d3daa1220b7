"""Registration, login, token refresh and password reset."""

from __future__ import annotations

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.savemate.core.errors import Conflict, NotFound, Unauthorized, ValidationError
from src.savemate.core.models.identity import Identity, Role, TokenPair, TokenPayload
from src.savemate.core.security import (
    MAX_PASSWORD_BYTES,
    exceeds_password_bytes,
    hash_password,
    verify_password,
)
from src.savemate.core.services.token_service import TokenService
from src.savemate.entities.core.business_profile import (
    BusinessProfile,
    BusinessProfileRepository,
)
from src.savemate.entities.core.user import User, UserRepository

SELF_SERVICE_ROLES = frozenset({Role.USER, Role.BUSINESS})
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 72

# Checked against when the email is unknown so both failure paths cost a bcrypt round
_DUMMY_HASH = hash_password("savemate-timing-equaliser")


def check_new_password(password: str, field: str = "password") -> None:
    """Raise a field error unless bcrypt can hash ``password`` without truncating it."""
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValidationError.for_field(
            field, f"Password must be {MIN_PASSWORD_LENGTH}-{MAX_PASSWORD_LENGTH} characters"
        )
    if exceeds_password_bytes(password):
        raise ValidationError.for_field(
            field, f"Password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8"
        )


class AuthService:
    def __init__(self, session: Session, tokens: TokenService) -> None:
        self._session = session
        self._tokens = tokens
        self._users = UserRepository(session)
        self._profiles = BusinessProfileRepository(session)

    def _payload_for(self, user: User) -> TokenPayload:
        business_id = None
        if user.role is Role.BUSINESS:
            profile = self._profiles.get_by_user_id(user.id)
            business_id = profile.id if profile else None
        return TokenPayload(sub=user.id, role=user.role, business_id=business_id)

    def create_user(self, email: str, password: str, role: Role) -> User:
        """Store a new account (and its business profile for BUSINESS users).

        Raises:
            Conflict: The email is already registered.
            ValidationError: The password is too short or too long.
        """
        check_new_password(password)
        if self._users.get_by_email(email) is not None:
            raise Conflict("Email already registered")

        try:
            user = self._users.create(
                User(email=email, password_hash=hash_password(password), role=role)
            )
            if role is Role.BUSINESS:
                self._profiles.create(BusinessProfile(user_id=user.id, name=user.email))
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise Conflict("Email already registered") from e

        logger.info("Registered user {} with role {}", user.id, role.value)
        return user

    def register(self, email: str, password: str, role: Role = Role.USER) -> TokenPair:
        if role not in SELF_SERVICE_ROLES:
            raise ValidationError.for_field("role", "Role must be USER or BUSINESS")
        user = self.create_user(email, password, role)
        return self._tokens.issue_pair(self._payload_for(user))

    def login(self, email: str, password: str) -> TokenPair:
        user = self._users.get_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise Unauthorized("Invalid credentials")
        if not verify_password(password, user.password_hash):
            raise Unauthorized("Invalid credentials")

        logger.info("User {} logged in", user.id)
        return self._tokens.issue_pair(self._payload_for(user))

    def refresh(self, refresh_token: str | None) -> TokenPair:
        if not refresh_token:
            raise Unauthorized("Missing refresh token")
        return self._tokens.refresh(refresh_token)

    async def forgot_password(self, email: str) -> str | None:
        return await self._tokens.issue_password_reset_token(self._users, email)

    async def reset_password(self, token: str, new_password: str) -> None:
        # the token is single use, so reject bad input before consuming it
        check_new_password(new_password, field="newPassword")
        user_id = await self._tokens.consume_password_reset_token(token)
        if not self._users.update_password_hash(user_id, hash_password(new_password)):
            raise Unauthorized("Invalid or expired reset token")
        self._session.commit()
        logger.info("Password reset for user {}", user_id)

    def me(self, identity: Identity) -> tuple[User, str | None]:
        """The caller's account and business profile id, if any."""
        user = self._users.get(identity.user_id)
        if user is None:
            raise NotFound("User not found")
        business_id = identity.business_id
        if business_id is None and user.role is Role.BUSINESS:
            profile = self._profiles.get_by_user_id(user.id)
            business_id = profile.id if profile else None
        return user, business_id
