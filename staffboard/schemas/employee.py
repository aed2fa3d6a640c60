import uuid
from datetime import date, datetime
from pydantic import BaseModel, Field


class EmployeeCreate(BaseModel):
    employee_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    designation: str = Field(min_length=1, max_length=200)
    date_of_joining: date
    department_id: uuid.UUID | None = None
    reporting_manager_id: uuid.UUID | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    profile_picture_url: str | None = Field(default=None, max_length=500)


class EmployeeUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    employee_code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    designation: str | None = Field(default=None, min_length=1, max_length=200)
    date_of_joining: date | None = None
    department_id: uuid.UUID | None = None
    reporting_manager_id: uuid.UUID | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    profile_picture_url: str | None = Field(default=None, max_length=500)


class EmployeeOut(BaseModel):
    id: str
    employee_code: str
    name: str
    email: str
    designation: str
    date_of_joining: date
    department_id: str | None
    department_name: str | None = None
    reporting_manager_id: str | None
    reporting_manager_name: str | None = None
    phone_number: str | None
    profile_picture_url: str | None
    created_at: datetime
    updated_at: datetime


class LoadSegmentOut(BaseModel):
    start_date: date
    end_date: date
    hard: int
    soft: int
    combined: int
    band: str


class EmployeeLoadOut(BaseModel):
    employee_id: str
    start_date: date
    end_date: date
    peak_hard: int
    peak_combined: int
    segments: list[LoadSegmentOut]
