from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, Field, model_validator

ProjectStatus = Literal["active", "on_hold", "completed"]


class ProjectCreate(BaseModel):
    project_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    client_name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date
    status: ProjectStatus = "active"
    completion_percentage: int = Field(default=0, ge=0, le=100)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class ProjectUpdate(BaseModel):
    project_code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    client_name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    status: ProjectStatus | None = None
    completion_percentage: int | None = Field(default=None, ge=0, le=100)


class ProjectOut(BaseModel):
    id: str
    project_code: str
    name: str
    client_name: str
    description: str | None
    start_date: date
    end_date: date
    status: str
    completion_percentage: int
    created_at: datetime
    updated_at: datetime
