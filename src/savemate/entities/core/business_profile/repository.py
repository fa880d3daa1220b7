"""Data-access layer for business profiles."""

from sqlmodel import Session, select

from src.savemate.entities.core.business_profile.entity import BusinessProfile
from src.savemate.entities.core.business_profile.table import BusinessProfileTable


class BusinessProfileRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, profile_id: str) -> BusinessProfile | None:
        row = self._session.get(BusinessProfileTable, profile_id)
        if row is None:
            return None
        return BusinessProfile.model_validate(row, from_attributes=True)

    def get_by_user_id(self, user_id: str) -> BusinessProfile | None:
        statement = select(BusinessProfileTable).where(
            BusinessProfileTable.user_id == user_id
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return BusinessProfile.model_validate(row, from_attributes=True)

    def create(self, profile: BusinessProfile) -> BusinessProfile:
        row = BusinessProfileTable(
            id=profile.id,
            user_id=profile.user_id,
            name=profile.name,
            tax_id=profile.tax_id,
            city=profile.city,
            voivodeship=profile.voivodeship.value if profile.voivodeship else None,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
        )
        self._session.add(row)
        self._session.flush()
        return BusinessProfile.model_validate(row, from_attributes=True)
