from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    visit_id: int
    created_at: datetime
    last_updated_at: datetime
    last_updated_by: Optional[int] = None


class VitalsIn(BaseModel):
    height: float = Field(ge=0, validation_alias=AliasChoices("height", "height_cm"))
    weight: float = Field(ge=0, validation_alias=AliasChoices("weight", "weight_kg"))
    bmi: Optional[float] = Field(default=None, ge=0)
    below_3rd_percentile: Optional[bool] = None
    bp_systolic: Optional[int] = Field(default=None, ge=0)
    bp_diastolic: Optional[int] = Field(default=None, ge=0)
    temperature: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("temperature", "temperature_c")
    )
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "vitals_notes"))


class VitalsOut(RecordOut):
    height: float
    weight: float
    bmi: Optional[float] = None
    below_3rd_percentile: Optional[bool] = None
    bp_systolic: Optional[int] = None
    bp_diastolic: Optional[int] = None
    temperature: Optional[float] = None
    notes: Optional[str] = None


class HefIn(BaseModel):
    know_of_hef: bool = Field(validation_alias=AliasChoices("know_of_hef", "know_hef"))
    has_hef: bool = Field(validation_alias=AliasChoices("has_hef", "have_hef"))
    notes: Optional[str] = Field(default=None, validation_alias=AliasChoices("notes", "hef_notes"))


class HefOut(RecordOut):
    know_of_hef: bool
    has_hef: bool
    notes: Optional[str] = None


class VisualAcuityIn(BaseModel):
    left_with_pinhole: Optional[str] = Field(default=None, max_length=20)
    left_without_pinhole: Optional[str] = Field(default=None, max_length=20)
    right_with_pinhole: Optional[str] = Field(default=None, max_length=20)
    right_without_pinhole: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = None


class VisualAcuityOut(RecordOut, VisualAcuityIn):
    pass


class PresentingComplaintIn(BaseModel):
    history: Optional[str] = None
    red_flags: Optional[str] = None
    systems_review: Optional[str] = None
    drug_allergies: Optional[str] = None


class PresentingComplaintOut(RecordOut, PresentingComplaintIn):
    pass


class HistoryIn(BaseModel):
    past: Optional[str] = None
    drug_and_treatment: Optional[str] = None
    family: Optional[str] = None
    social: Optional[str] = None
    systems_review: Optional[str] = None


class HistoryOut(RecordOut, HistoryIn):
    pass


class ConsultationIn(BaseModel):
    notes: Optional[str] = None
    prescription: Optional[str] = None
    require_referral: Optional[bool] = None


class ConsultationOut(RecordOut, ConsultationIn):
    pass


class SevaIn(BaseModel):
    left_with_pinhole_new: Optional[str] = Field(default=None, max_length=20)
    right_with_pinhole_new: Optional[str] = Field(default=None, max_length=20)
    left_without_pinhole_new: Optional[str] = Field(default=None, max_length=20)
    right_without_pinhole_new: Optional[str] = Field(default=None, max_length=20)
    diagnosis: Optional[str] = None
    date_of_referral: Optional[date] = None
    notes: Optional[str] = None


class SevaOut(RecordOut, SevaIn):
    pass


class PainpointIn(BaseModel):
    x_coord: float = Field(validation_alias=AliasChoices("x_coord", "xCoord"))
    y_coord: float = Field(validation_alias=AliasChoices("y_coord", "yCoord"))


class PainpointOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    x_coord: float
    y_coord: float


class PhysiotherapyIn(BaseModel):
    notes: Optional[str] = None
    painpoints: list[PainpointIn] = Field(default_factory=list)


class PhysiotherapyOut(RecordOut):
    notes: Optional[str] = None
    painpoints: list[PainpointOut] = Field(default_factory=list)
