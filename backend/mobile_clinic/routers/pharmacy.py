from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.pharmacy import (
    PharmacyAdjust,
    PharmacyItemCreate,
    PharmacyItemDeleted,
    PharmacyItemOut,
    PharmacyItemUpdate,
)
from mobile_clinic.services.pharmacy import adjust_item, create_item, delete_item, list_items, set_item

router = APIRouter(prefix="/pharmacy", tags=["pharmacy"])


@router.get("", response_model=list[PharmacyItemOut])
def get_items(db: Session = Depends(get_db), _identity=Depends(require_action("pharmacy.read"))):
    return list_items(db)


@router.post("", response_model=PharmacyItemOut, status_code=status.HTTP_201_CREATED)
def add_item(
    payload: PharmacyItemCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("pharmacy.write")),
):
    return create_item(db, payload, actor_id=identity.id)


@router.put("/{item_id}", response_model=PharmacyItemOut)
def edit_item(
    item_id: int,
    payload: PharmacyItemUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("pharmacy.write")),
):
    return set_item(db, item_id, payload, actor_id=identity.id)


@router.patch("/{item_id}/adjust", response_model=PharmacyItemOut)
def adjust_stock(
    item_id: int,
    payload: PharmacyAdjust,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("pharmacy.write")),
):
    return adjust_item(db, item_id, payload.delta, actor_id=identity.id)


@router.delete("/{item_id}", response_model=PharmacyItemDeleted)
def remove_item(
    item_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("pharmacy.write")),
):
    delete_item(db, item_id)
    return PharmacyItemDeleted(message="Item deleted", id=item_id)
