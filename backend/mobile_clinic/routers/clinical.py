from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mobile_clinic.core.policy import Identity
from mobile_clinic.db.session import get_db
from mobile_clinic.deps import require_action
from mobile_clinic.schemas.clinical import (
    ConsultationIn,
    ConsultationOut,
    HefIn,
    HefOut,
    HistoryIn,
    HistoryOut,
    PhysiotherapyIn,
    PhysiotherapyOut,
    PresentingComplaintIn,
    PresentingComplaintOut,
    SevaIn,
    SevaOut,
    VisualAcuityIn,
    VisualAcuityOut,
    VitalsIn,
    VitalsOut,
)
from mobile_clinic.services.clinical import (
    RECORD_MODELS,
    list_patient_records,
    read_record,
    upsert_physiotherapy,
    upsert_record,
)

router = APIRouter(tags=["clinical"])

RECORD_SCHEMAS = {
    "vitals": (VitalsIn, VitalsOut),
    "hef": (HefIn, HefOut),
    "visual_acuity": (VisualAcuityIn, VisualAcuityOut),
    "presenting_complaint": (PresentingComplaintIn, PresentingComplaintOut),
    "history": (HistoryIn, HistoryOut),
    "consultation": (ConsultationIn, ConsultationOut),
    "seva": (SevaIn, SevaOut),
}


def _add_read_routes(kind: str, model, out_schema) -> None:
    def read(
        visit_id: int,
        db: Session = Depends(get_db),
        _identity=Depends(require_action(f"{kind}.read")),
    ):
        return read_record(db, model, visit_id)

    def list_for_patient(
        patient_id: int,
        visit_date: Optional[date] = Query(default=None),
        db: Session = Depends(get_db),
        _identity=Depends(require_action(f"{kind}.read")),
    ):
        return list_patient_records(db, model, patient_id, visit_date=visit_date)

    router.add_api_route(
        f"/{kind}/{{visit_id}}",
        read,
        methods=["GET"],
        response_model=Optional[out_schema],
        name=f"get_{kind}",
    )
    router.add_api_route(
        f"/patients/{{patient_id}}/{kind}",
        list_for_patient,
        methods=["GET"],
        response_model=list[out_schema],
        name=f"list_patient_{kind}",
    )


def _add_upsert_routes(kind: str, model, in_schema, out_schema) -> None:
    def upsert(
        visit_id: int,
        payload: in_schema,
        db: Session = Depends(get_db),
        identity: Identity = Depends(require_action(f"{kind}.write")),
    ):
        return upsert_record(db, model, visit_id, payload, actor_id=identity.id)

    for method in ("POST", "PUT"):
        router.add_api_route(
            f"/{kind}/{{visit_id}}",
            upsert,
            methods=[method],
            response_model=out_schema,
            status_code=status.HTTP_200_OK,
            name=f"{method.lower()}_{kind}",
        )


for _kind, (_in_schema, _out_schema) in RECORD_SCHEMAS.items():
    _add_read_routes(_kind, RECORD_MODELS[_kind], _out_schema)
    _add_upsert_routes(_kind, RECORD_MODELS[_kind], _in_schema, _out_schema)

_add_read_routes("physiotherapy", RECORD_MODELS["physiotherapy"], PhysiotherapyOut)


@router.post("/physiotherapy/{visit_id}", response_model=PhysiotherapyOut)
def create_physiotherapy(
    visit_id: int,
    payload: PhysiotherapyIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("physiotherapy.write")),
):
    return upsert_physiotherapy(db, visit_id, payload, actor_id=identity.id)


@router.put("/physiotherapy/{visit_id}", response_model=PhysiotherapyOut)
def replace_physiotherapy(
    visit_id: int,
    payload: PhysiotherapyIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_action("physiotherapy.write")),
):
    return upsert_physiotherapy(db, visit_id, payload, actor_id=identity.id)
