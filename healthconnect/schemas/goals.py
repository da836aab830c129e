from typing import Literal
from pydantic import BaseModel, Field

MetricName = Literal["water", "calories", "sleep"]


class LogValueRequest(BaseModel):
    type: MetricName
    value: float = Field(ge=0)


class SetTargetRequest(BaseModel):
    type: MetricName
    target: float = Field(gt=0)
