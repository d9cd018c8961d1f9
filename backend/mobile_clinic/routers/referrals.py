from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.referral import ReferralIn, ReferralOut
from mobile_clinic.services.referrals import (
    create_referral,
    delete_referral,
    list_consultation_referrals,
    list_visit_referrals,
    update_referral,
)

router = APIRouter(tags=["referrals"])


@router.get("/visits/{visit_id}/referrals", response_model=list[ReferralOut])
def get_visit_referrals(
    visit_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("referrals.read")),
):
    return list_visit_referrals(db, visit_id)


@router.post("/visits/{visit_id}/referrals", response_model=ReferralOut, status_code=status.HTTP_201_CREATED)
def add_referral(
    visit_id: int,
    payload: ReferralIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("referrals.write")),
):
    return create_referral(db, visit_id, payload, actor_id=identity.id)


@router.put("/referrals/{referral_id}", response_model=ReferralOut)
def edit_referral(
    referral_id: int,
    payload: ReferralIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("referrals.write")),
):
    return update_referral(db, referral_id, payload, actor_id=identity.id)


@router.delete("/referrals/{referral_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_referral(
    referral_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("referrals.write")),
):
    delete_referral(db, referral_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/consultations/{consultation_id}/referrals", response_model=list[ReferralOut])
def get_consultation_referrals(
    consultation_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("referrals.read")),
):
    return list_consultation_referrals(db, consultation_id)
