from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from staffboard.allocation import AllocationService
from staffboard.core.allocation import get_allocation_service
from staffboard.db.session import get_db
from staffboard.models.employee import Employee
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.schemas.stats import DashboardSummary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=DashboardSummary)
def dashboard_summary(
    as_of: date | None = Query(default=None, description="Day the figures are computed for (defaults to today)"),
    db: Session = Depends(get_db),
    service: AllocationService = Depends(get_allocation_service),
):
    as_of = as_of or date.today()

    active_projects = db.query(func.count(Project.id)).filter(Project.status == "active").scalar() or 0
    employee_ids = [r[0] for r in db.query(Employee.id).all()]

    running = (
        db.query(ProjectAssignment.utilization_percentage)
        .filter(ProjectAssignment.start_date <= as_of, ProjectAssignment.end_date >= as_of)
        .all()
    )
    average = round(sum(r[0] for r in running) / len(running)) if running else 0

    available = sum(1 for eid in employee_ids if service.available_on(eid, as_of) > 0)

    by_urgency = {"normal": 0, "medium": 0, "urgent": 0}
    for urgency, count in (
        db.query(HiringRequirement.urgency, func.count(HiringRequirement.id))
        .group_by(HiringRequirement.urgency)
        .all()
    ):
        by_urgency[urgency] = count
    open_positions = db.query(func.coalesce(func.sum(HiringRequirement.number_of_openings), 0)).scalar()

    return DashboardSummary(
        as_of=as_of,
        active_projects=active_projects,
        total_employees=len(employee_ids),
        average_utilization=average,
        available_employees=available,
        open_positions=int(open_positions or 0),
        positions_by_urgency=by_urgency,
    )
