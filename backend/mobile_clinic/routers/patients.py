from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.patient import PatientCreate, PatientDetailOut, PatientOut, PatientUpdate
from mobile_clinic.schemas.visit import VisitOut
from mobile_clinic.services.patients import (
    create_patient,
    delete_patient,
    list_patients,
    patient_detail,
    search_patients,
    update_patient,
)
from mobile_clinic.services.visits import list_patient_visits

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientOut])
def get_patients(
    location_id: Optional[int] = Query(default=None),
    location_name: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    _identity=Depends(require_action("patients.read")),
):
    return list_patients(db, location_id=location_id, location_name=location_name)


@router.get("/search", response_model=list[PatientOut])
def find_patients(
    q: str = Query(default="", max_length=200),
    db: Session = Depends(get_db),
    _identity=Depends(require_action("patients.read")),
):
    return search_patients(db, q)


@router.post("", response_model=PatientOut, status_code=status.HTTP_201_CREATED)
def add_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("patients.write")),
):
    return create_patient(db, payload, actor_id=identity.id)


@router.get("/{patient_id}", response_model=PatientDetailOut)
def get_patient_detail(
    patient_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("patients.read")),
):
    return patient_detail(db, patient_id)


@router.put("/{patient_id}", response_model=PatientOut)
def edit_patient(
    patient_id: int,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("patients.write")),
):
    return update_patient(db, patient_id, payload, actor_id=identity.id)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_patient(
    patient_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("patients.write")),
):
    delete_patient(db, patient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{patient_id}/visits", response_model=list[VisitOut])
def get_patient_visits(
    patient_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("visits.read")),
):
    return list_patient_visits(db, patient_id)
