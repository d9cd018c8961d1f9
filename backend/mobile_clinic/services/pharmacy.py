from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import DuplicateName, NotFound, ValidationError
from mobile_clinic.models.pharmacy import PharmacyItem
from mobile_clinic.schemas.pharmacy import PharmacyItemCreate, PharmacyItemUpdate

logger = logging.getLogger("mobile_clinic.pharmacy")


def _clean_name(raw: str | None) -> str:
    name = (raw or "").strip()
    if not name:
        raise ValidationError.for_field("name", "Item name is required")
    return name


def _flush_named(db: Session, name: str) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Pharmacy item name already exists: %s", name)
        raise DuplicateName("Item name already exists") from exc


def list_items(db: Session) -> list[PharmacyItem]:
    return list(db.scalars(select(PharmacyItem).order_by(PharmacyItem.name.asc())))


def get_item(db: Session, item_id: int) -> PharmacyItem:
    item = db.get(PharmacyItem, item_id)
    if item is None:
        raise NotFound("Pharmacy item not found")
    return item


def create_item(db: Session, payload: PharmacyItemCreate, *, actor_id: int | None = None) -> PharmacyItem:
    name = _clean_name(payload.name)
    if payload.stock_level < 0:
        raise ValidationError.for_field("stock_level", "Initial stock must be zero or more")
    item = PharmacyItem(name=name, stock_level=payload.stock_level)
    item.stamp(actor_id)
    db.add(item)
    _flush_named(db, name)
    db.commit()
    db.refresh(item)
    return item


def set_item(
    db: Session, item_id: int, payload: PharmacyItemUpdate, *, actor_id: int | None = None
) -> PharmacyItem:
    item = get_item(db, item_id)
    if payload.name is not None:
        item.name = _clean_name(payload.name)
    if payload.stock_level is not None:
        item.stock_level = max(0, payload.stock_level)
    item.stamp(actor_id)
    _flush_named(db, item.name)
    db.commit()
    db.refresh(item)
    return item


def adjust_item(db: Session, item_id: int, delta: int, *, actor_id: int | None = None) -> PharmacyItem:
    """Add ``delta`` to the stock in one statement, flooring the result at zero."""
    new_level = PharmacyItem.stock_level + delta
    result = db.execute(
        update(PharmacyItem)
        .where(PharmacyItem.id == item_id)
        .values(
            stock_level=case((new_level < 0, 0), else_=new_level),
            last_updated_at=datetime.now(timezone.utc),
            last_updated_by=actor_id,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFound("Pharmacy item not found")
    db.commit()
    return get_item(db, item_id)


def delete_item(db: Session, item_id: int) -> None:
    item = get_item(db, item_id)
    db.delete(item)
    db.commit()
