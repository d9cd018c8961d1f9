from mobile_clinic.models.base import Base
from mobile_clinic.models.user import User
from mobile_clinic.models.location import Location
from mobile_clinic.models.patient import Patient, Sex
from mobile_clinic.models.visit import Visit
from mobile_clinic.models.clinical import (
    Consultation,
    Hef,
    History,
    Painpoint,
    PresentingComplaint,
    Physiotherapy,
    Seva,
    VisualAcuity,
    Vitals,
)
from mobile_clinic.models.referral import Referral, ReferralType
from mobile_clinic.models.pharmacy import PharmacyItem

__all__ = [
    "Base",
    "User",
    "Location",
    "Patient",
    "Sex",
    "Visit",
    "Vitals",
    "Hef",
    "VisualAcuity",
    "PresentingComplaint",
    "History",
    "Consultation",
    "Seva",
    "Physiotherapy",
    "Painpoint",
    "Referral",
    "ReferralType",
    "PharmacyItem",
]
