from __future__ import annotations

import enum
from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobile_clinic.models.base import Base, StampMixin


class ReferralType(str, enum.Enum):
    mongkol_borey_hospital = "MongKol Borey Hospital"
    optometrist = "Optometrist"
    dentist = "Dentist"
    poipet_referral_hospital = "Poipet Referral Hospital"
    bong_bondol = "Bong Bondol"
    seva = "SEVA"
    ws_audiology = "WSAudiology"


class Referral(Base, StampMixin):
    __tablename__ = "referral"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    visit_id: Mapped[int] = mapped_column(
        ForeignKey("visits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    consultation_id: Mapped[int | None] = mapped_column(
        ForeignKey("consultation.id", ondelete="SET NULL"), nullable=True, index=True
    )
    doctor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    referral_date: Mapped[date] = mapped_column(Date, nullable=False)
    referral_type: Mapped[ReferralType] = mapped_column(
        Enum(
            ReferralType,
            name="referral_type",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    illness: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[str | None] = mapped_column(String(120), nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="referrals")
    consultation = relationship("Consultation", back_populates="referrals")
