import uuid
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

Urgency = Literal["normal", "medium", "urgent"]


class HiringRequirementCreate(BaseModel):
    position_name: str = Field(min_length=1, max_length=200)
    department_id: uuid.UUID | None = None
    number_of_openings: int = Field(default=1, ge=1)
    urgency: Urgency = "normal"
    experience_required: str = Field(min_length=1, max_length=200)
    job_description: str | None = None
    job_document_url: str | None = Field(default=None, max_length=500)


class HiringRequirementUpdate(BaseModel):
    position_name: str | None = Field(default=None, min_length=1, max_length=200)
    department_id: uuid.UUID | None = None
    number_of_openings: int | None = Field(default=None, ge=1)
    urgency: Urgency | None = None
    experience_required: str | None = Field(default=None, min_length=1, max_length=200)
    job_description: str | None = None
    job_document_url: str | None = Field(default=None, max_length=500)


class HiringRequirementOut(BaseModel):
    id: str
    position_name: str
    department_id: str | None
    department_name: str | None = None
    number_of_openings: int
    urgency: str
    experience_required: str
    job_description: str | None
    job_document_url: str | None
    created_at: datetime
    updated_at: datetime
