from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import NotFound, ValidationError
from mobile_clinic.models.clinical import Consultation
from mobile_clinic.models.referral import Referral
from mobile_clinic.schemas.referral import ReferralIn
from mobile_clinic.services.visits import get_visit


def get_referral(db: Session, referral_id: int) -> Referral:
    referral = db.get(Referral, referral_id)
    if referral is None:
        raise NotFound("Referral not found")
    return referral


def _check_consultation(db: Session, consultation_id: int | None, visit_id: int) -> None:
    if consultation_id is None:
        return
    consultation = db.get(Consultation, consultation_id)
    if consultation is None or consultation.visit_id != visit_id:
        raise ValidationError.for_field("consultation_id", "Consultation does not belong to this visit")


def _apply(referral: Referral, payload: ReferralIn, actor_id: int | None) -> None:
    referral.consultation_id = payload.consultation_id
    referral.referral_date = payload.referral_date or date.today()
    referral.referral_type = payload.referral_type
    referral.illness = payload.illness
    referral.duration = payload.duration
    referral.reason = payload.reason
    referral.doctor_id = actor_id
    referral.stamp(actor_id)


def create_referral(
    db: Session, visit_id: int, payload: ReferralIn, *, actor_id: int | None = None
) -> Referral:
    get_visit(db, visit_id)
    _check_consultation(db, payload.consultation_id, visit_id)
    referral = Referral(visit_id=visit_id)
    _apply(referral, payload, actor_id)
    db.add(referral)
    db.commit()
    db.refresh(referral)
    return referral


def update_referral(
    db: Session, referral_id: int, payload: ReferralIn, *, actor_id: int | None = None
) -> Referral:
    referral = get_referral(db, referral_id)
    _check_consultation(db, payload.consultation_id, referral.visit_id)
    _apply(referral, payload, actor_id)
    db.commit()
    db.refresh(referral)
    return referral


def delete_referral(db: Session, referral_id: int) -> None:
    referral = get_referral(db, referral_id)
    db.delete(referral)
    db.commit()


def list_visit_referrals(db: Session, visit_id: int) -> list[Referral]:
    get_visit(db, visit_id)
    stmt = (
        select(Referral)
        .where(Referral.visit_id == visit_id)
        .order_by(Referral.referral_date.desc(), Referral.id.desc())
    )
    return list(db.scalars(stmt))


def list_consultation_referrals(db: Session, consultation_id: int) -> list[Referral]:
    if db.get(Consultation, consultation_id) is None:
        raise NotFound("Consultation not found")
    stmt = (
        select(Referral)
        .where(Referral.consultation_id == consultation_id)
        .order_by(Referral.referral_date.desc(), Referral.id.desc())
    )
    return list(db.scalars(stmt))
