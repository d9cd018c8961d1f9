"""Queue tokens: normalization, assignment to visits and the per-patient mirror."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import DuplicateQueueEntry, NotFound, ValidationError
from mobile_clinic.models.patient import Patient
from mobile_clinic.models.visit import Visit
from mobile_clinic.services.patients import age_on

logger = logging.getLogger("mobile_clinic.queue")

QUEUE_TOKEN_MAX_LENGTH = 16
QUEUE_TOKEN_PATTERN = re.compile(r"[0-9]{1,16}[A-Za-z]{0,15}", re.ASCII)


def normalize_queue_token(raw: Any) -> str:
    """Trim and uppercase a queue token: digits followed by optional letters (``2``, ``2A``, ``102B``)."""
    token = "" if raw is None else str(raw).strip()
    if not token:
        raise ValidationError.for_field("queue_no", "Queue number is required")
    # visits.queue_no and patients.queue_no are String(16)
    if len(token) > QUEUE_TOKEN_MAX_LENGTH:
        raise ValidationError.for_field(
            "queue_no", f"Queue number must be at most {QUEUE_TOKEN_MAX_LENGTH} characters"
        )
    if not QUEUE_TOKEN_PATTERN.fullmatch(token):
        raise ValidationError.for_field(
            "queue_no", "Queue number must be digits optionally followed by letters (e.g. 2, 2A)"
        )
    return token.upper()


def mirror_queue_no(patient: Patient, token: str) -> None:
    patient.queue_no = token


def assign_queue_no(db: Session, visit: Visit, token: str, *, actor_id: int | None = None) -> None:
    """Give ``visit`` an already normalized token and flush; a conflict rolls back the transaction."""
    location_id, visit_date = visit.location_id, visit.visit_date
    visit.queue_no = token
    visit.stamp(actor_id)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "Queue conflict: location=%s date=%s queue_no=%s", location_id, visit_date, token
        )
        raise DuplicateQueueEntry() from exc


def set_visit_queue_number(db: Session, visit_id: int, raw_token: Any, *, actor_id: int | None = None) -> Visit:
    token = normalize_queue_token(raw_token)
    visit = db.get(Visit, visit_id)
    if visit is None:
        raise NotFound("Visit not found")
    assign_queue_no(db, visit, token, actor_id=actor_id)
    mirror_queue_no(visit.patient, token)
    db.commit()
    db.refresh(visit)
    return visit


def list_queue(db: Session, location_id: int, visit_date: date) -> list[dict[str, Any]]:
    # Tokens sort as text, so "10" comes before "2".
    stmt = (
        select(Visit, Patient)
        .join(Patient, Patient.id == Visit.patient_id)
        .where(Visit.location_id == location_id, Visit.visit_date == visit_date)
        .order_by(Visit.queue_no.asc(), Patient.english_name.asc())
    )
    entries = []
    for visit, patient in db.execute(stmt).all():
        entries.append(
            {
                "visit_id": visit.id,
                "patient_id": patient.id,
                "queue_no": visit.queue_no,
                "english_name": patient.english_name,
                "khmer_name": patient.khmer_name,
                "sex": patient.sex,
                "age": age_on(patient.date_of_birth, visit.visit_date),
                "location_id": visit.location_id,
                "location_name": visit.location_name,
                "visit_date": visit.visit_date,
                "created_at": visit.created_at,
            }
        )
    return entries
