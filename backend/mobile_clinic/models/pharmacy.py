from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mobile_clinic.models.base import Base, StampMixin


class PharmacyItem(Base, StampMixin):
    __tablename__ = "pharmacy_items"
    __table_args__ = (CheckConstraint("stock_level >= 0", name="ck_pharmacy_items_stock_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    stock_level: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
