from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mobile_clinic.models.patient import Sex


class PatientFields(BaseModel):
    face_id: Optional[str] = Field(default=None, max_length=120)
    english_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    khmer_name: Optional[str] = Field(default=None, max_length=200)
    date_of_birth: Optional[date] = None
    sex: Optional[Sex] = None
    phone_number: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = None
    location_id: Optional[int] = None

    @field_validator("sex", mode="before")
    @classmethod
    def _lower_sex(cls, value):
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value


class PatientCreate(PatientFields):
    english_name: str = Field(min_length=1, max_length=200)
    location_id: int


class PatientUpdate(PatientFields):
    pass


class PatientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    face_id: Optional[str] = None
    english_name: str
    khmer_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    sex: Optional[Sex] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    location_id: int
    location_name: Optional[str] = None
    queue_no: Optional[str] = None
    created_at: datetime
    last_updated_at: datetime
    last_updated_by: Optional[int] = None


class PatientVisitSummary(BaseModel):
    visit_id: int
    queue_no: str
    visit_date: date
    location_name: Optional[str] = None
    last_updated_at: datetime
    has_vitals: bool
    has_presenting_complaint: bool
    has_seva: bool
    has_physiotherapy: bool
    has_consultation: bool


class PatientDetailOut(BaseModel):
    patient: PatientOut
    visits: list[PatientVisitSummary]
