"""Composite patient registration.

A registration creates or updates a patient, resolves the visit for the
supplied queue token and records the intake vitals/HEF forms. Every step runs
in one transaction: a failure anywhere, a queue conflict included, leaves no
trace of the request in the database.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from mobile_clinic.core.errors import ClinicError, ValidationError
from mobile_clinic.models.clinical import Hef, Vitals
from mobile_clinic.models.patient import Patient
from mobile_clinic.schemas.registration import RegistrationCreate, RegistrationUpdate
from mobile_clinic.schemas.visit import VisitIn
from mobile_clinic.services.clinical import stage_record
from mobile_clinic.services.patients import add_patient, apply_patient_update, delete_patient, get_patient
from mobile_clinic.services.queue import assign_queue_no, mirror_queue_no, normalize_queue_token
from mobile_clinic.services.visits import find_visit_for_day, resolve_visit

logger = logging.getLogger("mobile_clinic.registration")


def _require_visit_for_forms(payload: RegistrationCreate | RegistrationUpdate) -> None:
    if payload.visit is None and (payload.vitals is not None or payload.hef is not None):
        raise ValidationError.for_field("visit", "Visit data is required when vitals or hef are supplied")


def _stage_forms(
    db: Session, payload: RegistrationCreate | RegistrationUpdate, visit_id: int, actor_id: int | None
) -> dict[str, Any]:
    staged: dict[str, Any] = {"vitals": None, "hef": None}
    if payload.vitals is not None:
        staged["vitals"] = stage_record(db, Vitals, visit_id, payload.vitals.model_dump(), actor_id=actor_id)
    if payload.hef is not None:
        staged["hef"] = stage_record(db, Hef, visit_id, payload.hef.model_dump(), actor_id=actor_id)
    return staged


def _resolve_for_patient(
    db: Session, patient: Patient, visit_in: VisitIn, actor_id: int | None, *, reuse_day_visit: bool
):
    location_id = visit_in.location_id or patient.location_id
    visit_date = visit_in.visit_date or date.today()
    if reuse_day_visit:
        token = normalize_queue_token(visit_in.queue_no)
        existing = find_visit_for_day(
            db, patient_id=patient.id, location_id=location_id, visit_date=visit_date
        )
        if existing is not None:
            if existing.queue_no != token:
                assign_queue_no(db, existing, token, actor_id=actor_id)
            return existing
    visit, _created = resolve_visit(
        db,
        patient_id=patient.id,
        location_id=location_id,
        raw_queue_no=visit_in.queue_no,
        visit_date=visit_date,
        actor_id=actor_id,
    )
    return visit


def _result(db: Session, patient: Patient, visit, staged: dict[str, Any]) -> dict[str, Any]:
    db.refresh(patient)
    if visit is not None:
        db.refresh(visit)
    for record in staged.values():
        if record is not None:
            db.refresh(record)
    return {"patient": patient, "visit": visit, **staged}


def register_patient(db: Session, payload: RegistrationCreate, *, actor_id: int | None = None) -> dict[str, Any]:
    _require_visit_for_forms(payload)
    try:
        patient = add_patient(db, payload.patient, actor_id=actor_id)
        visit = None
        staged: dict[str, Any] = {"vitals": None, "hef": None}
        if payload.visit is not None:
            visit = _resolve_for_patient(db, patient, payload.visit, actor_id, reuse_day_visit=False)
            staged = _stage_forms(db, payload, visit.id, actor_id)
            mirror_queue_no(patient, visit.queue_no)
        db.commit()
    except ClinicError as exc:
        db.rollback()
        logger.warning("Registration failed (%s): %s", exc.kind, exc.message)
        raise
    except Exception:
        db.rollback()
        raise
    return _result(db, patient, visit, staged)


def update_registration(
    db: Session, patient_id: int, payload: RegistrationUpdate, *, actor_id: int | None = None
) -> dict[str, Any]:
    """Apply a composite update to an existing patient.

    When the patient already has a visit at the target location on the target
    date, that visit takes the supplied queue token; otherwise a visit is
    resolved by its natural key as for a new registration.
    """
    _require_visit_for_forms(payload)
    patient = get_patient(db, patient_id)
    try:
        if payload.patient is not None:
            apply_patient_update(db, patient, payload.patient, actor_id=actor_id)
        visit = None
        staged: dict[str, Any] = {"vitals": None, "hef": None}
        if payload.visit is not None:
            visit = _resolve_for_patient(db, patient, payload.visit, actor_id, reuse_day_visit=True)
            staged = _stage_forms(db, payload, visit.id, actor_id)
            mirror_queue_no(patient, visit.queue_no)
        db.commit()
    except ClinicError as exc:
        db.rollback()
        logger.warning("Registration update for patient %s failed (%s): %s", patient_id, exc.kind, exc.message)
        raise
    except Exception:
        db.rollback()
        raise
    return _result(db, patient, visit, staged)


def delete_registration(db: Session, patient_id: int) -> None:
    delete_patient(db, patient_id)
