from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.location import LocationCreate, LocationOut
from mobile_clinic.services.locations import create_location, deactivate_location, list_active_locations

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=list[LocationOut])
def list_locations(db: Session = Depends(get_db), _identity=Depends(require_action("locations.read"))):
    return list_active_locations(db)


@router.post("", response_model=LocationOut, status_code=status.HTTP_201_CREATED)
def add_location(
    payload: LocationCreate,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("locations.write")),
):
    return create_location(db, payload.name)


@router.delete("/{location_id}", response_model=LocationOut)
def remove_location(
    location_id: int,
    db: Session = Depends(get_db),
    _identity=Depends(require_action("locations.write")),
):
    return deactivate_location(db, location_id)
