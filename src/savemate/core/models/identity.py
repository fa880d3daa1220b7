"""Identity and token models shared by the token service and the guard."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    ADMIN = "ADMIN"
    USER = "USER"
    BUSINESS = "BUSINESS"


class KeyClass(StrEnum):
    """Which signing secret a token belongs to."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenPayload(BaseModel):
    """The application claims carried by both access and refresh tokens."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sub: str = Field(min_length=1, description="User id")
    role: Role
    business_id: str | None = Field(default=None, alias="businessId")

    def to_claims(self) -> dict[str, str]:
        claims: dict[str, str] = {"role": self.role.value}
        if self.business_id:
            claims["businessId"] = self.business_id
        return claims


class TokenPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str


class Identity(BaseModel):
    """The caller resolved for the lifetime of one request.

    Immutable; enrichment produces a new instance.
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Role
    business_id: str | None = None

    @classmethod
    def from_payload(cls, payload: TokenPayload) -> Identity:
        return cls(user_id=payload.sub, role=payload.role, business_id=payload.business_id)

    def with_business(self, business_id: str) -> Identity:
        return self.model_copy(update={"business_id": business_id})

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
