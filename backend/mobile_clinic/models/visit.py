from __future__ import annotations

from datetime import date

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobile_clinic.models.base import Base, StampMixin

_OWNED = dict(cascade="all, delete-orphan", passive_deletes=True)


class Visit(Base, StampMixin):
    __tablename__ = "visits"
    __table_args__ = (
        UniqueConstraint("location_id", "visit_date", "queue_no", name="uq_visits_location_date_queue"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    location_id: Mapped[int] = mapped_column(ForeignKey("locations.id"), nullable=False)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    queue_no: Mapped[str] = mapped_column(String(16), nullable=False)

    patient = relationship("Patient", back_populates="visits")
    location = relationship("Location", lazy="joined")

    vitals = relationship("Vitals", uselist=False, back_populates="visit", **_OWNED)
    hef = relationship("Hef", uselist=False, back_populates="visit", **_OWNED)
    visual_acuity = relationship("VisualAcuity", uselist=False, back_populates="visit", **_OWNED)
    presenting_complaint = relationship(
        "PresentingComplaint", uselist=False, back_populates="visit", **_OWNED
    )
    history = relationship("History", uselist=False, back_populates="visit", **_OWNED)
    consultation = relationship("Consultation", uselist=False, back_populates="visit", **_OWNED)
    seva = relationship("Seva", uselist=False, back_populates="visit", **_OWNED)
    physiotherapy = relationship("Physiotherapy", uselist=False, back_populates="visit", **_OWNED)
    referrals = relationship(
        "Referral",
        back_populates="visit",
        order_by="Referral.referral_date.desc()",
        **_OWNED,
    )

    @property
    def location_name(self) -> str | None:
        return self.location.name if self.location else None
