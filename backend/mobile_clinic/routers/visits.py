import hashlib
import json
from datetime import date

from fastapi import APIRouter, Depends, Header, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.visit import (
    QueueEntryOut,
    VisitDetailOut,
    VisitOut,
    VisitQueueUpdate,
    VisitResolveRequest,
)
from mobile_clinic.services.queue import list_queue, set_visit_queue_number
from mobile_clinic.services.visits import get_visit, open_visit

router = APIRouter(prefix="/visits", tags=["visits"])


def _etag(body: dict) -> str:
    digest = hashlib.sha256(json.dumps(body, sort_keys=True).encode("utf-8")).hexdigest()
    return f'"{digest}"'


@router.post("", response_model=VisitOut, status_code=status.HTTP_201_CREATED)
def resolve_visit(
    payload: VisitResolveRequest,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("visits.write")),
):
    visit, created = open_visit(
        db,
        patient_id=payload.patient_id,
        raw_queue_no=payload.queue_no,
        location_id=payload.location_id,
        visit_date=payload.visit_date,
        actor_id=identity.id,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return visit


@router.get("/by-location-and-date", response_model=list[QueueEntryOut])
def queue_for_location(
    location_id: int = Query(...),
    visit_date: date = Query(...),
    db: Session = Depends(get_db),
    _identity=Depends(require_action("visits.read")),
):
    return list_queue(db, location_id, visit_date)


@router.get("/{visit_id}", response_model=VisitDetailOut)
def get_visit_detail(
    visit_id: int,
    db: Session = Depends(get_db),
    if_none_match: str | None = Header(default=None),
    _identity=Depends(require_action("visits.read")),
):
    visit = get_visit(db, visit_id)
    body = VisitDetailOut.model_validate(visit).model_dump(mode="json")
    etag = _etag(body)
    if if_none_match and if_none_match == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})
    return JSONResponse(content=body, headers={"ETag": etag})


@router.put("/{visit_id}", response_model=VisitOut)
def update_visit_queue(
    visit_id: int,
    payload: VisitQueueUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("visits.write")),
):
    return set_visit_queue_number(db, visit_id, payload.queue_no, actor_id=identity.id)
