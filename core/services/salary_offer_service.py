# =============================================================================
# core/services/salary_offer_service.py - Salary Offer Business Logic
# =============================================================================
# Records offers and counter-offers per application so negotiations can be
# compared side by side.
# =============================================================================

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.dependencies import RequestContext
from app.exceptions import NotFoundError, ValidationFailedError
from core.models.common import AuditAction
from core.models.salary_offer import SalaryOfferCreate, SalaryOfferUpdate
from core.services.application_service import ApplicationService
from core.services.audit_service import AuditService
from core.tables import SalaryOffer
from lib.database import utcnow

ENTITY = "SalaryOffer"


class SalaryOfferService:

    @staticmethod
    def get_owned(db: Session, user_id: str, offer_id: str) -> SalaryOffer:
        offer = db.scalar(
            select(SalaryOffer).where(
                SalaryOffer.id == offer_id,
                SalaryOffer.user_id == user_id,
                SalaryOffer.deleted_at.is_(None),
            )
        )
        if offer is None:
            raise NotFoundError("Salary offer")
        return offer

    @staticmethod
    def list_offers(db: Session, user_id: str, application_id: str | None = None) -> list[SalaryOffer]:
        """Newest offer first."""
        stmt = select(SalaryOffer).where(SalaryOffer.user_id == user_id, SalaryOffer.deleted_at.is_(None))
        if application_id:
            ApplicationService.get_owned(db, user_id, application_id)
            stmt = stmt.where(SalaryOffer.application_id == application_id)
        return list(db.scalars(stmt.order_by(SalaryOffer.offer_date.desc())).all())

    @staticmethod
    def create_offer(
        db: Session,
        user_id: str,
        data: SalaryOfferCreate,
        ctx: RequestContext | None = None,
    ) -> SalaryOffer:
        ApplicationService.get_owned(db, user_id, data.application_id)

        values = data.model_dump()
        values["currency"] = values["currency"].upper()
        if values["offer_date"] is None:
            values["offer_date"] = utcnow()

        offer = SalaryOffer(user_id=user_id, **values)
        db.add(offer)
        db.commit()
        db.refresh(offer)

        AuditService.record(
            db, user_id, AuditAction.OFFER_CREATED,
            entity_type=ENTITY, entity_id=offer.application_id,
            meta={"offer_id": offer.id, "base_salary": offer.base_salary},
            ctx=ctx,
        )
        return offer

    @staticmethod
    def update_offer(
        db: Session,
        user_id: str,
        offer_id: str,
        data: SalaryOfferUpdate,
        ctx: RequestContext | None = None,
    ) -> SalaryOffer:
        offer = SalaryOfferService.get_owned(db, user_id, offer_id)
        changes = data.model_dump(exclude_unset=True)
        for required in ("type", "base_salary", "offer_date", "currency"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError("Invalid input", {required: ["Field cannot be empty"]})
        if "currency" in changes:
            changes["currency"] = changes["currency"].upper()

        for field, value in changes.items():
            setattr(offer, field, value)
        offer.updated_at = utcnow()
        db.commit()
        db.refresh(offer)

        AuditService.record(
            db, user_id, AuditAction.OFFER_UPDATED,
            entity_type=ENTITY, entity_id=offer.application_id,
            meta={"offer_id": offer.id, "fields": sorted(changes.keys())},
            ctx=ctx,
        )
        return offer

    @staticmethod
    def delete_offer(db: Session, user_id: str, offer_id: str, ctx: RequestContext | None = None) -> None:
        offer = SalaryOfferService.get_owned(db, user_id, offer_id)
        offer.soft_delete()
        db.commit()

        AuditService.record(
            db, user_id, AuditAction.OFFER_DELETED,
            entity_type=ENTITY, entity_id=offer.application_id, meta={"offer_id": offer.id}, ctx=ctx,
        )
