from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


Role = Literal["client", "admin"]


class Credentials(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)
    role: Role


class UserOut(BaseModel):
    id: int
    email: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    success: bool = True
    user: UserOut
    token: str
