"""Administrator moderation of deals.

Approve and reject only apply to PENDING deals and are written as a single
UPDATE conditioned on the status still being PENDING, so when two moderators
race on one deal the second write changes nothing and is reported as a
``Conflict`` carrying the status the first one set. ``set_status`` is the
unconditional override.

Every transition is committed before its audit entry is written.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlmodel import Session

from src.savemate.core.errors import Conflict, NotFound, ValidationError
from src.savemate.core.models.catalog import DealStatus
from src.savemate.core.models.deals import DealQuery
from src.savemate.core.models.identity import Identity
from src.savemate.core.query import DealPageResult, DealQueryEngine
from src.savemate.core.services.moderation.audit import (
    AuditOutcome,
    AuditSink,
    DatabaseAuditSink,
    write_audit,
)
from src.savemate.entities.service.audit_log import AuditAction
from src.savemate.entities.service.deal import Deal, DealRepository

DEAL_ENTITY = "Deal"
MIN_REASON_LENGTH = 3
MAX_REASON_LENGTH = 500


@dataclass(frozen=True)
class ModerationResult:
    """A committed transition plus what happened to its audit entry."""

    deal: Deal
    audit_recorded: bool
    audit_error: str | None = None

    @classmethod
    def of(cls, deal: Deal, outcome: AuditOutcome) -> ModerationResult:
        return cls(deal=deal, audit_recorded=outcome.recorded, audit_error=outcome.error)


def clean_reason(reason: str | None, required: bool) -> str | None:
    if reason is None or not reason.strip():
        if required:
            raise ValidationError.for_field("reason", "Reason is required")
        return None
    reason = reason.strip()
    if len(reason) < MIN_REASON_LENGTH:
        raise ValidationError.for_field(
            "reason", f"Reason must be at least {MIN_REASON_LENGTH} characters"
        )
    if len(reason) > MAX_REASON_LENGTH:
        raise ValidationError.for_field(
            "reason", f"Reason must be at most {MAX_REASON_LENGTH} characters"
        )
    return reason


class ModerationService:
    def __init__(
        self,
        session: Session,
        audit_sink: AuditSink | None = None,
        hide_expired: bool = True,
    ) -> None:
        self._session = session
        self._deals = DealRepository(session)
        self._audit = audit_sink or DatabaseAuditSink(session)
        self._engine = DealQueryEngine(self._deals, hide_expired=hide_expired)

    def _load(self, deal_id: str) -> Deal:
        deal = self._deals.get(deal_id)
        if deal is None:
            raise NotFound("Deal not found")
        return deal

    def _conflict(self, action: str, status: DealStatus) -> Conflict:
        return Conflict(
            f"Only PENDING deals can be {action}", details={"status": status.value}
        )

    def _moderate_pending(self, deal_id: str, to: DealStatus, action: str) -> Deal:
        deal = self._load(deal_id)
        if deal.status is not DealStatus.PENDING:
            raise self._conflict(action, deal.status)

        if not self._deals.transition(deal_id, to, expected_from=DealStatus.PENDING):
            self._session.rollback()
            current = self._load(deal_id)
            logger.info("Deal {} changed concurrently to {}", deal_id, current.status)
            raise self._conflict(action, current.status)

        self._session.commit()
        logger.info("Deal {} moved PENDING -> {}", deal_id, to.value)
        return self._load(deal_id)

    def approve(self, identity: Identity, deal_id: str) -> ModerationResult:
        deal = self._moderate_pending(deal_id, DealStatus.APPROVED, "approved")
        outcome = write_audit(
            self._audit,
            identity.user_id,
            AuditAction.DEAL_APPROVE,
            DEAL_ENTITY,
            deal_id,
            {"from": DealStatus.PENDING.value, "to": deal.status.value},
        )
        return ModerationResult.of(deal, outcome)

    def reject(self, identity: Identity, deal_id: str, reason: str) -> ModerationResult:
        reason = clean_reason(reason, required=True)
        deal = self._moderate_pending(deal_id, DealStatus.REJECTED, "rejected")
        outcome = write_audit(
            self._audit,
            identity.user_id,
            AuditAction.DEAL_REJECT,
            DEAL_ENTITY,
            deal_id,
            {"from": DealStatus.PENDING.value, "to": deal.status.value, "reason": reason},
        )
        return ModerationResult.of(deal, outcome)

    def set_status(
        self,
        identity: Identity,
        deal_id: str,
        status: DealStatus,
        reason: str | None = None,
    ) -> ModerationResult:
        """Move a deal to any status, whatever its current one.

        A reason is mandatory when the target is REJECTED.
        """
        reason = clean_reason(reason, required=status is DealStatus.REJECTED)
        previous = self._load(deal_id)

        self._deals.transition(deal_id, status)
        self._session.commit()
        logger.info(
            "Deal {} status set {} -> {} by {}",
            deal_id,
            previous.status.value,
            status.value,
            identity.user_id,
        )

        meta: dict[str, str] = {"from": previous.status.value, "to": status.value}
        if reason is not None:
            meta["reason"] = reason
        outcome = write_audit(
            self._audit,
            identity.user_id,
            AuditAction.DEAL_SET_STATUS,
            DEAL_ENTITY,
            deal_id,
            meta,
        )
        return ModerationResult.of(self._load(deal_id), outcome)

    def delete_deal(self, identity: Identity, deal_id: str) -> None:
        self._load(deal_id)
        self._deals.delete(deal_id)
        self._session.commit()
        logger.info("Deal {} deleted by administrator {}", deal_id, identity.user_id)

    def list_deals(self, query: DealQuery) -> DealPageResult:
        return self._engine.for_admin(query)

    def list_pending(self, query: DealQuery) -> DealPageResult:
        return self._engine.for_admin(query.model_copy(update={"status": DealStatus.PENDING}))
