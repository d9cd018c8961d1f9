from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mobile_clinic.models.referral import ReferralType


class ReferralIn(BaseModel):
    referral_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("referral_date", "referralDate")
    )
    referral_type: ReferralType = Field(validation_alias=AliasChoices("referral_type", "referralType"))
    illness: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("illness", "referral_symptom")
    )
    duration: Optional[str] = Field(
        default=None,
        max_length=120,
        validation_alias=AliasChoices("duration", "referral_symptom_duration"),
    )
    reason: Optional[str] = Field(default=None, validation_alias=AliasChoices("reason", "referral_reason"))
    consultation_id: Optional[int] = None


class ReferralOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    visit_id: int
    consultation_id: Optional[int] = None
    doctor_id: Optional[int] = None
    referral_date: date
    referral_type: ReferralType
    illness: Optional[str] = None
    duration: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime
    last_updated_at: datetime
    last_updated_by: Optional[int] = None
