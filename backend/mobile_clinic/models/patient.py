from __future__ import annotations

import enum
from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobile_clinic.models.base import Base, StampMixin


class Sex(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


class Patient(Base, StampMixin):
    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    face_id: Mapped[str | None] = mapped_column(String(120), nullable=True)
    english_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    khmer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    sex: Mapped[Sex | None] = mapped_column(Enum(Sex, name="sex_enum"), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    location_id: Mapped[int] = mapped_column(ForeignKey("locations.id"), nullable=False, index=True)
    # Mirror of the queue token most recently assigned to one of this patient's visits.
    queue_no: Mapped[str | None] = mapped_column(String(16), nullable=True)

    location = relationship("Location", lazy="joined")
    visits = relationship(
        "Visit",
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Visit.visit_date.desc()",
    )

    @property
    def location_name(self) -> str | None:
        return self.location.name if self.location else None
