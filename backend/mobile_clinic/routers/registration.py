from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.registration import (
    RegistrationCreate,
    RegistrationDeleted,
    RegistrationOut,
    RegistrationUpdate,
)
from mobile_clinic.services.registration import delete_registration, register_patient, update_registration

router = APIRouter(prefix="/registration", tags=["registration"])


@router.post("", response_model=RegistrationOut, status_code=status.HTTP_201_CREATED)
def create_registration(
    payload: RegistrationCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("registration.write")),
):
    return register_patient(db, payload, actor_id=identity.id)


@router.put("/{patient_id}", response_model=RegistrationOut)
def edit_registration(
    patient_id: int,
    payload: RegistrationUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("registration.write")),
):
    return update_registration(db, patient_id, payload, actor_id=identity.id)


@router.delete("/{patient_id}", response_model=RegistrationDeleted)
def remove_registration(
    patient_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("registration.write")),
):
    delete_registration(db, patient_id)
    return RegistrationDeleted(message="Patient and related records deleted", patient_id=patient_id)
