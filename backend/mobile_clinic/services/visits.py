"""Get-or-create resolution of visits by their natural key."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import DuplicateQueueEntry, NotFound
from mobile_clinic.models.location import Location
from mobile_clinic.models.visit import Visit
from mobile_clinic.services.patients import get_patient
from mobile_clinic.services.queue import mirror_queue_no, normalize_queue_token

logger = logging.getLogger("mobile_clinic.visits")


def get_visit(db: Session, visit_id: int) -> Visit:
    visit = db.get(Visit, visit_id)
    if visit is None:
        raise NotFound("Visit not found")
    return visit


def find_visit(
    db: Session, *, patient_id: int, location_id: int, visit_date: date, queue_no: str
) -> Visit | None:
    stmt = select(Visit).where(
        Visit.patient_id == patient_id,
        Visit.location_id == location_id,
        Visit.visit_date == visit_date,
        Visit.queue_no == queue_no,
    )
    return db.scalar(stmt)


def find_visit_for_day(db: Session, *, patient_id: int, location_id: int, visit_date: date) -> Visit | None:
    stmt = (
        select(Visit)
        .where(
            Visit.patient_id == patient_id,
            Visit.location_id == location_id,
            Visit.visit_date == visit_date,
        )
        .order_by(Visit.created_at.desc(), Visit.id.desc())
    )
    return db.scalars(stmt).first()


def resolve_visit(
    db: Session,
    *,
    patient_id: int,
    location_id: int,
    raw_queue_no: Any,
    visit_date: date | None = None,
    actor_id: int | None = None,
) -> tuple[Visit, bool]:
    """Return the visit for (patient, location, date, token), inserting it when absent.

    The new row is flushed but not committed; callers own the transaction. A
    concurrent insert of the same key loses at the unique constraint and the
    whole transaction is rolled back before ``DuplicateQueueEntry`` is raised.
    """
    token = normalize_queue_token(raw_queue_no)
    visit_date = visit_date or date.today()
    if db.get(Location, location_id) is None:
        raise NotFound("Location not found")

    existing = find_visit(
        db, patient_id=patient_id, location_id=location_id, visit_date=visit_date, queue_no=token
    )
    if existing is not None:
        return existing, False

    visit = Visit(patient_id=patient_id, location_id=location_id, visit_date=visit_date, queue_no=token)
    visit.stamp(actor_id)
    db.add(visit)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(
            "Queue conflict: location=%s date=%s queue_no=%s", location_id, visit_date, token
        )
        raise DuplicateQueueEntry() from exc
    return visit, True


def open_visit(
    db: Session,
    *,
    patient_id: int,
    raw_queue_no: Any,
    location_id: int | None = None,
    visit_date: date | None = None,
    actor_id: int | None = None,
) -> tuple[Visit, bool]:
    patient = get_patient(db, patient_id)
    visit, created = resolve_visit(
        db,
        patient_id=patient.id,
        location_id=location_id or patient.location_id,
        raw_queue_no=raw_queue_no,
        visit_date=visit_date,
        actor_id=actor_id,
    )
    mirror_queue_no(patient, visit.queue_no)
    db.commit()
    db.refresh(visit)
    return visit, created


def list_patient_visits(db: Session, patient_id: int) -> list[Visit]:
    get_patient(db, patient_id)
    stmt = (
        select(Visit)
        .where(Visit.patient_id == patient_id)
        .order_by(Visit.visit_date.desc(), Visit.created_at.desc(), Visit.id.desc())
    )
    return list(db.scalars(stmt))
