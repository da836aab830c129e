from typing import Literal, Optional
from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    role: Literal["patient", "provider"] = "patient"
    # provider-only
    specialization: Optional[str] = None
    hospital: Optional[str] = None
    licenseNumber: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)


class LoginRequest(BaseModel):
    email: str
    password: str
    role: Optional[Literal["patient", "provider"]] = None
