from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict

from mobile_clinic.models.patient import Sex
from mobile_clinic.schemas.clinical import (
    ConsultationOut,
    HefOut,
    HistoryOut,
    PhysiotherapyOut,
    PresentingComplaintOut,
    SevaOut,
    VisualAcuityOut,
    VitalsOut,
)
from mobile_clinic.schemas.referral import ReferralOut


def _token_to_str(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


RawQueueNo = Annotated[Optional[str], BeforeValidator(_token_to_str)]


class VisitIn(BaseModel):
    location_id: Optional[int] = None
    visit_date: Optional[date] = None
    queue_no: RawQueueNo = None


class VisitResolveRequest(VisitIn):
    patient_id: int


class VisitQueueUpdate(BaseModel):
    queue_no: RawQueueNo = None


class VisitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    location_id: int
    location_name: Optional[str] = None
    visit_date: date
    queue_no: str
    created_at: datetime
    last_updated_at: datetime


class QueueEntryOut(BaseModel):
    visit_id: int
    patient_id: int
    queue_no: str
    english_name: str
    khmer_name: Optional[str] = None
    sex: Optional[Sex] = None
    age: Optional[int] = None
    location_id: int
    location_name: Optional[str] = None
    visit_date: date
    created_at: datetime


class VisitDetailOut(VisitOut):
    vitals: Optional[VitalsOut] = None
    hef: Optional[HefOut] = None
    visual_acuity: Optional[VisualAcuityOut] = None
    presenting_complaint: Optional[PresentingComplaintOut] = None
    history: Optional[HistoryOut] = None
    consultation: Optional[ConsultationOut] = None
    seva: Optional[SevaOut] = None
    physiotherapy: Optional[PhysiotherapyOut] = None
    referrals: list[ReferralOut] = []
