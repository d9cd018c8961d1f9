from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=3, max_length=120)


class IdentityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    username: str


class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: IdentityOut
