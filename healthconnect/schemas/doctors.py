from pydantic import BaseModel, Field


class AssignRequest(BaseModel):
    doctorId: str = Field(min_length=1)
