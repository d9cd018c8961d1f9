"""Per-visit clinical records.

Every record kind holds at most one row per visit. Writes are full overwrites:
the first write for a visit inserts the row, later writes replace every field
of that row and advance its update stamp.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.models.clinical import (
    Consultation,
    Hef,
    History,
    Painpoint,
    Physiotherapy,
    PresentingComplaint,
    Seva,
    VisualAcuity,
    Vitals,
)
from mobile_clinic.models.visit import Visit
from mobile_clinic.schemas.clinical import PhysiotherapyIn
from mobile_clinic.services.patients import get_patient
from mobile_clinic.services.visits import get_visit

logger = logging.getLogger("mobile_clinic.clinical")

RecordT = TypeVar("RecordT")

RECORD_MODELS = {
    "vitals": Vitals,
    "hef": Hef,
    "visual_acuity": VisualAcuity,
    "presenting_complaint": PresentingComplaint,
    "history": History,
    "consultation": Consultation,
    "seva": Seva,
    "physiotherapy": Physiotherapy,
}


def get_record(db: Session, model: type[RecordT], visit_id: int) -> RecordT | None:
    return db.scalar(select(model).where(model.visit_id == visit_id))


def stage_record(
    db: Session, model: type[RecordT], visit_id: int, values: dict, *, actor_id: int | None = None
) -> RecordT:
    """Insert or overwrite the visit's row in the current transaction without committing."""
    record = get_record(db, model, visit_id)
    if record is None:
        record = model(visit_id=visit_id)
        db.add(record)
    for field, value in values.items():
        setattr(record, field, value)
    record.stamp(actor_id)
    db.flush()
    return record


def upsert_record(
    db: Session, model: type[RecordT], visit_id: int, payload: BaseModel, *, actor_id: int | None = None
) -> RecordT:
    get_visit(db, visit_id)
    values = payload.model_dump()
    try:
        record = stage_record(db, model, visit_id, values, actor_id=actor_id)
        db.commit()
    except IntegrityError:
        # Another request inserted the row first; the retry finds it and overwrites.
        db.rollback()
        logger.info("Retrying %s upsert for visit %s after concurrent insert", model.__tablename__, visit_id)
        record = stage_record(db, model, visit_id, values, actor_id=actor_id)
        db.commit()
    db.refresh(record)
    return record


def _stage_physiotherapy(
    db: Session, visit_id: int, payload: PhysiotherapyIn, *, actor_id: int | None
) -> Physiotherapy:
    record = stage_record(db, Physiotherapy, visit_id, {"notes": payload.notes}, actor_id=actor_id)
    painpoints = []
    for point in payload.painpoints:
        painpoint = Painpoint(x_coord=point.x_coord, y_coord=point.y_coord)
        painpoint.stamp(actor_id)
        painpoints.append(painpoint)
    # Orphaned points are deleted in the same flush that inserts the new set.
    record.painpoints = painpoints
    db.flush()
    return record


def upsert_physiotherapy(
    db: Session, visit_id: int, payload: PhysiotherapyIn, *, actor_id: int | None = None
) -> Physiotherapy:
    get_visit(db, visit_id)
    try:
        record = _stage_physiotherapy(db, visit_id, payload, actor_id=actor_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Retrying physiotherapy upsert for visit %s after concurrent insert", visit_id)
        record = _stage_physiotherapy(db, visit_id, payload, actor_id=actor_id)
        db.commit()
    db.refresh(record)
    return record


def read_record(db: Session, model: type[RecordT], visit_id: int) -> RecordT | None:
    get_visit(db, visit_id)
    return get_record(db, model, visit_id)


def list_patient_records(
    db: Session, model: type[RecordT], patient_id: int, *, visit_date: date | None = None
) -> list[RecordT]:
    get_patient(db, patient_id)
    stmt = select(model).join(Visit, Visit.id == model.visit_id).where(Visit.patient_id == patient_id)
    if visit_date is not None:
        stmt = stmt.where(Visit.visit_date == visit_date)
    stmt = stmt.order_by(model.last_updated_at.desc(), model.id.desc())
    return list(db.scalars(stmt))
