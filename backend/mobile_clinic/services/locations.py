from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import DuplicateName, NotFound, ValidationError
from mobile_clinic.models.location import Location

logger = logging.getLogger("mobile_clinic.locations")


def list_active_locations(db: Session) -> list[Location]:
    stmt = select(Location).where(Location.is_active.is_(True)).order_by(Location.name.asc())
    return list(db.scalars(stmt))


def get_location(db: Session, location_id: int) -> Location:
    location = db.get(Location, location_id)
    if location is None:
        raise NotFound("Location not found")
    return location


def create_location(db: Session, raw_name: str) -> Location:
    name = (raw_name or "").strip()
    if not name:
        raise ValidationError.for_field("name", "Location name is required")
    existing = db.scalar(select(Location).where(Location.name == name))
    if existing is not None:
        if existing.is_active:
            raise DuplicateName("Location already exists")
        existing.is_active = True
        db.commit()
        db.refresh(existing)
        return existing
    location = Location(name=name, is_active=True)
    db.add(location)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateName("Location already exists") from exc
    db.commit()
    db.refresh(location)
    return location


def deactivate_location(db: Session, location_id: int) -> Location:
    location = get_location(db, location_id)
    location.is_active = False
    db.commit()
    db.refresh(location)
    return location


def ensure_default_locations(db: Session, names: list[str]) -> list[str]:
    existing = set(db.scalars(select(Location.name)))
    created = [name for name in names if name not in existing]
    for name in created:
        db.add(Location(name=name, is_active=True))
    if created:
        db.commit()
        logger.info("Seeded locations: %s", ", ".join(created))
    return created
