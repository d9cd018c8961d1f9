from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PharmacyItemCreate(BaseModel):
    name: str = Field(max_length=200)
    stock_level: int = 0


class PharmacyItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    stock_level: Optional[int] = None


class PharmacyAdjust(BaseModel):
    delta: int


class PharmacyItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    stock_level: int
    last_updated_at: datetime
    last_updated_by: Optional[int] = None


class PharmacyItemDeleted(BaseModel):
    message: str
    id: int
