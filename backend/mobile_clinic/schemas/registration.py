from typing import Optional

from pydantic import BaseModel

from mobile_clinic.schemas.clinical import HefIn, HefOut, VitalsIn, VitalsOut
from mobile_clinic.schemas.patient import PatientCreate, PatientOut, PatientUpdate
from mobile_clinic.schemas.visit import VisitIn, VisitOut


class RegistrationCreate(BaseModel):
    patient: PatientCreate
    visit: Optional[VisitIn] = None
    vitals: Optional[VitalsIn] = None
    hef: Optional[HefIn] = None


class RegistrationUpdate(BaseModel):
    patient: Optional[PatientUpdate] = None
    visit: Optional[VisitIn] = None
    vitals: Optional[VitalsIn] = None
    hef: Optional[HefIn] = None


class RegistrationOut(BaseModel):
    patient: Optional[PatientOut] = None
    visit: Optional[VisitOut] = None
    vitals: Optional[VitalsOut] = None
    hef: Optional[HefOut] = None


class RegistrationDeleted(BaseModel):
    message: str
    patient_id: int
