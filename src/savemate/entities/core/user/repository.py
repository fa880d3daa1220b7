"""Data-access layer for users."""

from sqlmodel import Session, select

from src.savemate.entities._base import utc_now
from src.savemate.entities.core.user.entity import User
from src.savemate.entities.core.user.table import UserTable


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == normalize_email(email))
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def create(self, user: User) -> User:
        row = UserTable(
            id=user.id,
            email=normalize_email(user.email),
            password_hash=user.password_hash,
            role=user.role.value,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)

    def update_password_hash(self, user_id: str, password_hash: str) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        row.password_hash = password_hash
        row.updated_at = utc_now()
        self._session.add(row)
        self._session.flush()
        return True
