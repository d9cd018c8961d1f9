from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from mobile_clinic.core.errors import NotFound
from mobile_clinic.models.location import Location
from mobile_clinic.models.patient import Patient
from mobile_clinic.models.visit import Visit
from mobile_clinic.schemas.patient import PatientCreate, PatientUpdate

logger = logging.getLogger("mobile_clinic.patients")

SEARCH_LIMIT = 10


def age_on(date_of_birth: date | None, on_date: date) -> int | None:
    if date_of_birth is None:
        return None
    years = on_date.year - date_of_birth.year
    if (on_date.month, on_date.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return max(years, 0)


def _require_location(db: Session, location_id: int) -> None:
    if db.get(Location, location_id) is None:
        raise NotFound("Location not found")


def get_patient(db: Session, patient_id: int) -> Patient:
    patient = db.get(Patient, patient_id)
    if patient is None:
        raise NotFound("Patient not found")
    return patient


def add_patient(db: Session, payload: PatientCreate, *, actor_id: int | None = None) -> Patient:
    """Stage a new patient and flush it so its id is available; does not commit."""
    _require_location(db, payload.location_id)
    patient = Patient(**payload.model_dump())
    patient.stamp(actor_id)
    db.add(patient)
    db.flush()
    return patient


def create_patient(db: Session, payload: PatientCreate, *, actor_id: int | None = None) -> Patient:
    patient = add_patient(db, payload, actor_id=actor_id)
    db.commit()
    db.refresh(patient)
    return patient


def apply_patient_update(
    db: Session, patient: Patient, payload: PatientUpdate, *, actor_id: int | None = None
) -> Patient:
    """Overwrite only the fields the caller supplied; omitted or null fields keep their values."""
    data = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "location_id" in data:
        _require_location(db, data["location_id"])
    for field, value in data.items():
        setattr(patient, field, value)
    patient.stamp(actor_id)
    db.flush()
    return patient


def update_patient(
    db: Session, patient_id: int, payload: PatientUpdate, *, actor_id: int | None = None
) -> Patient:
    patient = get_patient(db, patient_id)
    apply_patient_update(db, patient, payload, actor_id=actor_id)
    db.commit()
    db.refresh(patient)
    return patient


def delete_patient(db: Session, patient_id: int) -> None:
    patient = get_patient(db, patient_id)
    db.delete(patient)
    db.commit()
    logger.info("Deleted patient %s with its visits and records", patient_id)


def list_patients(
    db: Session, *, location_id: int | None = None, location_name: str | None = None
) -> list[Patient]:
    stmt = select(Patient)
    if location_id is not None:
        stmt = stmt.where(Patient.location_id == location_id)
    if location_name:
        stmt = stmt.join(Location, Location.id == Patient.location_id).where(Location.name == location_name)
    stmt = stmt.order_by(Patient.english_name.asc(), Patient.id.asc())
    return list(db.scalars(stmt).unique())


def search_patients(db: Session, q: str) -> list[Patient]:
    term = q.strip()
    if not term:
        return []
    like = f"%{term}%"
    stmt = (
        select(Patient)
        .where(or_(Patient.english_name.ilike(like), Patient.khmer_name.ilike(like)))
        .order_by(Patient.english_name.asc(), Patient.id.asc())
        .limit(SEARCH_LIMIT)
    )
    return list(db.scalars(stmt).unique())


def patient_visit_summaries(db: Session, patient_id: int) -> list[dict[str, Any]]:
    stmt = (
        select(Visit)
        .where(Visit.patient_id == patient_id)
        .options(
            selectinload(Visit.vitals),
            selectinload(Visit.presenting_complaint),
            selectinload(Visit.seva),
            selectinload(Visit.physiotherapy),
            selectinload(Visit.consultation),
        )
        .order_by(Visit.visit_date.desc(), Visit.created_at.desc(), Visit.id.desc())
    )
    return [
        {
            "visit_id": visit.id,
            "queue_no": visit.queue_no,
            "visit_date": visit.visit_date,
            "location_name": visit.location_name,
            "last_updated_at": visit.last_updated_at,
            "has_vitals": visit.vitals is not None,
            "has_presenting_complaint": visit.presenting_complaint is not None,
            "has_seva": visit.seva is not None,
            "has_physiotherapy": visit.physiotherapy is not None,
            "has_consultation": visit.consultation is not None,
        }
        for visit in db.scalars(stmt).unique()
    ]


def patient_detail(db: Session, patient_id: int) -> dict[str, Any]:
    patient = get_patient(db, patient_id)
    return {"patient": patient, "visits": patient_visit_summaries(db, patient_id)}
