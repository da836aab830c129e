from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class PatientProfileUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    weight: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    allergies: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    bloodType: Optional[str] = None


class ProviderProfileUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    specialization: Optional[str] = None
    hospital: Optional[str] = None
    licenseNumber: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0)


class RecommendationRequest(BaseModel):
    recommendation: str = Field(min_length=1)
    priority: Literal["high", "medium", "low"] = "medium"
