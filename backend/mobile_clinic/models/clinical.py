from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from mobile_clinic.models.base import Base, StampMixin


class VisitRecordMixin(StampMixin):
    """One row per visit; a second write for the same visit overwrites the first."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(primary_key=True, autoincrement=True)

    @declared_attr
    def visit_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("visits.id", ondelete="CASCADE"), unique=True, nullable=False, index=True
        )


class Vitals(Base, VisitRecordMixin):
    __tablename__ = "vitals"

    height: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    bmi: Mapped[float | None] = mapped_column(Float, nullable=True)
    below_3rd_percentile: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    bp_systolic: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bp_diastolic: Mapped[int | None] = mapped_column(Integer, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="vitals")


class Hef(Base, VisitRecordMixin):
    __tablename__ = "hef"

    know_of_hef: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_hef: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="hef")


class VisualAcuity(Base, VisitRecordMixin):
    __tablename__ = "visual_acuity"

    left_with_pinhole: Mapped[str | None] = mapped_column(String(20), nullable=True)
    left_without_pinhole: Mapped[str | None] = mapped_column(String(20), nullable=True)
    right_with_pinhole: Mapped[str | None] = mapped_column(String(20), nullable=True)
    right_without_pinhole: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="visual_acuity")


class PresentingComplaint(Base, VisitRecordMixin):
    __tablename__ = "presenting_complaint"

    history: Mapped[str | None] = mapped_column(Text, nullable=True)
    red_flags: Mapped[str | None] = mapped_column(Text, nullable=True)
    systems_review: Mapped[str | None] = mapped_column(Text, nullable=True)
    drug_allergies: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="presenting_complaint")


class History(Base, VisitRecordMixin):
    __tablename__ = "history"

    past: Mapped[str | None] = mapped_column(Text, nullable=True)
    drug_and_treatment: Mapped[str | None] = mapped_column(Text, nullable=True)
    family: Mapped[str | None] = mapped_column(Text, nullable=True)
    social: Mapped[str | None] = mapped_column(Text, nullable=True)
    systems_review: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="history")


class Consultation(Base, VisitRecordMixin):
    __tablename__ = "consultation"

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    prescription: Mapped[str | None] = mapped_column(Text, nullable=True)
    require_referral: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    visit = relationship("Visit", back_populates="consultation")
    referrals = relationship("Referral", back_populates="consultation", passive_deletes=True)


class Seva(Base, VisitRecordMixin):
    __tablename__ = "seva"

    left_with_pinhole_new: Mapped[str | None] = mapped_column(String(20), nullable=True)
    right_with_pinhole_new: Mapped[str | None] = mapped_column(String(20), nullable=True)
    left_without_pinhole_new: Mapped[str | None] = mapped_column(String(20), nullable=True)
    right_without_pinhole_new: Mapped[str | None] = mapped_column(String(20), nullable=True)
    diagnosis: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_of_referral: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="seva")


class Physiotherapy(Base, VisitRecordMixin):
    __tablename__ = "physiotherapy"

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    visit = relationship("Visit", back_populates="physiotherapy")
    painpoints = relationship(
        "Painpoint",
        back_populates="physiotherapy",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Painpoint.id",
    )


class Painpoint(Base, StampMixin):
    __tablename__ = "painpoints"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    physiotherapy_id: Mapped[int] = mapped_column(
        ForeignKey("physiotherapy.id", ondelete="CASCADE"), nullable=False, index=True
    )
    x_coord: Mapped[float] = mapped_column(Float, nullable=False)
    y_coord: Mapped[float] = mapped_column(Float, nullable=False)

    physiotherapy = relationship("Physiotherapy", back_populates="painpoints")
