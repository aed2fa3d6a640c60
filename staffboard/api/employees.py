import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffboard.allocation import AllocationService, CalendarInterval, utilization_band
from staffboard.core.allocation import get_allocation_service
from staffboard.core.audit import log_event
from staffboard.core.hierarchy import CyclicHierarchy, check_reporting_line
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.department import Department
from staffboard.models.employee import Employee
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.schemas.common import paginated
from staffboard.schemas.employee import (
    EmployeeCreate,
    EmployeeLoadOut,
    EmployeeOut,
    EmployeeUpdate,
    LoadSegmentOut,
)

router = APIRouter(prefix="/employees", tags=["employees"])

REQUIRED_FIELDS = ("employee_code", "name", "email", "designation", "date_of_joining")


def employee_to_out(e: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=str(e.id),
        employee_code=e.employee_code,
        name=e.name,
        email=e.email,
        designation=e.designation,
        date_of_joining=e.date_of_joining,
        department_id=str(e.department_id) if e.department_id else None,
        department_name=e.department.name if e.department else None,
        reporting_manager_id=str(e.reporting_manager_id) if e.reporting_manager_id else None,
        reporting_manager_name=e.reporting_manager.name if e.reporting_manager else None,
        phone_number=e.phone_number,
        profile_picture_url=e.profile_picture_url,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


def _get_or_404(db: Session, employee_id: uuid.UUID) -> Employee:
    e = db.get(Employee, employee_id)
    if not e:
        raise HTTPException(status_code=404, detail="Employee not found")
    return e


def _check_references(db: Session, department_id: uuid.UUID | None, manager_id: uuid.UUID | None) -> None:
    if department_id and not db.get(Department, department_id):
        raise HTTPException(status_code=400, detail={"missing_department_id": str(department_id)})
    if manager_id and not db.get(Employee, manager_id):
        raise HTTPException(status_code=400, detail={"missing_reporting_manager_id": str(manager_id)})


@router.get("")
def list_employees(
    search: str | None = Query(default=None, description="Search by name, employee code or email"),
    department_id: uuid.UUID | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500, description="Maximum number of results"),
    offset: int = Query(default=0, ge=0, description="Number of results to skip"),
    include_pagination: bool = Query(default=False, description="Include pagination metadata"),
    db: Session = Depends(get_db),
):
    """
    List employees with optional search and pagination.

    Use ?include_pagination=true to get pagination metadata.
    """
    query = db.query(Employee)

    if search:
        search_term = f"%{search.lower()}%"
        query = query.filter(
            (Employee.employee_code.ilike(search_term))
            | (Employee.name.ilike(search_term))
            | (Employee.email.ilike(search_term))
        )
    if department_id:
        query = query.filter(Employee.department_id == department_id)

    total = query.count()
    employees = query.order_by(Employee.name.asc()).offset(offset).limit(limit).all()
    items = [employee_to_out(e) for e in employees]

    if include_pagination:
        return paginated(items, total=total, limit=limit, offset=offset)
    return items


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: uuid.UUID, db: Session = Depends(get_db)):
    return employee_to_out(_get_or_404(db, employee_id))


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    _check_references(db, payload.department_id, payload.reporting_manager_id)

    e = Employee(**payload.model_dump())
    e.email = e.email.lower()
    db.add(e)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Employee code or email already exists")

    log_event(
        db=db,
        actor=actor,
        action="EMPLOYEE_CREATED",
        entity_type="employee",
        entity_id=e.id,
        metadata={"employee_code": e.employee_code, "name": e.name},
    )
    db.commit()
    db.refresh(e)
    return employee_to_out(e)


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    e = _get_or_404(db, employee_id)
    # explicit nulls on required columns are ignored, not written
    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k not in REQUIRED_FIELDS
    }

    _check_references(db, changes.get("department_id"), changes.get("reporting_manager_id"))

    if "reporting_manager_id" in changes:
        try:
            check_reporting_line(
                e.id,
                changes["reporting_manager_id"],
                lambda eid: db.query(Employee.reporting_manager_id).filter(Employee.id == eid).scalar(),
            )
        except CyclicHierarchy as exc:
            raise HTTPException(
                status_code=409,
                detail={"message": str(exc), "chain": [str(i) for i in exc.chain]},
            )

    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    for field, value in changes.items():
        setattr(e, field, value)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Employee code or email already exists")

    log_event(
        db=db,
        actor=actor,
        action="EMPLOYEE_UPDATED",
        entity_type="employee",
        entity_id=e.id,
        metadata={"changes": {k: str(v) if v is not None else None for k, v in changes.items()}},
    )
    db.commit()
    db.refresh(e)
    return employee_to_out(e)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    e = _get_or_404(db, employee_id)

    if service.assignments_for(e.id) or db.query(ProjectAssignment.id).filter(ProjectAssignment.employee_id == e.id).first():
        raise HTTPException(status_code=409, detail="Employee has project assignments; release them first")

    # detach direct reports explicitly rather than relying on ON DELETE SET NULL
    db.query(Employee).filter(Employee.reporting_manager_id == e.id).update(
        {Employee.reporting_manager_id: None}, synchronize_session="fetch"
    )
    log_event(
        db=db,
        actor=actor,
        action="EMPLOYEE_DELETED",
        entity_type="employee",
        entity_id=e.id,
        metadata={"employee_code": e.employee_code, "name": e.name},
    )
    db.delete(e)
    db.commit()


@router.get("/{employee_id}/load", response_model=EmployeeLoadOut)
def get_employee_load(
    employee_id: uuid.UUID,
    start_date: date = Query(..., description="First day of the window"),
    end_date: date = Query(..., description="Last day of the window (inclusive)"),
    db: Session = Depends(get_db),
    service: AllocationService = Depends(get_allocation_service),
):
    """
    Day-level load for one employee, as contiguous segments of constant utilization.
    """
    _get_or_404(db, employee_id)
    if start_date > end_date:
        raise HTTPException(status_code=422, detail="start_date must be on or before end_date")

    window = CalendarInterval(start_date, end_date)
    segments = service.load_profile(employee_id, window)
    return EmployeeLoadOut(
        employee_id=str(employee_id),
        start_date=start_date,
        end_date=end_date,
        peak_hard=max(s.hard for s in segments),
        peak_combined=max(s.combined for s in segments),
        segments=[
            LoadSegmentOut(
                start_date=s.interval.start,
                end_date=s.interval.end,
                hard=s.hard,
                soft=s.soft,
                combined=s.combined,
                band=utilization_band(s.combined),
            )
            for s in segments
        ],
    )
