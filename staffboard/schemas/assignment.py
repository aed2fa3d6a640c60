import uuid
from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel, Field, model_validator

LockTypeName = Literal["hard", "soft"]


class AssignmentProposal(BaseModel):
    """Shaped like a persisted assignment minus its identifier."""
    employee_id: uuid.UUID
    project_id: uuid.UUID
    role_id: uuid.UUID | None = None
    start_date: date
    end_date: date
    utilization_percentage: int = Field(ge=0, le=100)
    lock_type: LockTypeName = "soft"

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class AssignmentAmend(BaseModel):
    """Edit of an existing assignment; employee and project cannot change."""
    role_id: uuid.UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    utilization_percentage: int | None = Field(default=None, ge=0, le=100)


class LockTypeChange(BaseModel):
    lock_type: LockTypeName


class FindingOut(BaseModel):
    reason: str
    message: str


class UtilizationTotalsOut(BaseModel):
    hard_total: int
    soft_total: int
    combined_total: int


class VerdictOut(BaseModel):
    outcome: str  # accepted, accepted_with_warning, rejected
    accepted: bool
    findings: list[FindingOut]
    projected: UtilizationTotalsOut


class AssignmentOut(BaseModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    employee_designation: str | None = None
    department_name: str | None = None
    project_id: str
    project_name: str | None = None
    project_code: str | None = None
    project_status: str | None = None
    role_id: str | None
    role_name: str | None = None
    start_date: date
    end_date: date
    utilization_percentage: int
    utilization_band: str
    lock_type: str
    created_at: datetime
    updated_at: datetime


class AssignmentCommitOut(BaseModel):
    assignment: AssignmentOut
    verdict: VerdictOut
