import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffboard.allocation import (
    AllocationError,
    AllocationRejected,
    AllocationService,
    CalendarInterval,
    DuplicateAssignment,
    InvalidProposal,
    InvalidRange,
    NotFound,
    Proposal,
    Verdict,
    utilization_band,
)
from staffboard.core.allocation import (
    get_allocation_service,
    persist_commit,
    persist_release,
    persist_revision,
)
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.employee import Employee
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.models.role import Role
from staffboard.schemas.assignment import (
    AssignmentAmend,
    AssignmentCommitOut,
    AssignmentOut,
    AssignmentProposal,
    FindingOut,
    LockTypeChange,
    UtilizationTotalsOut,
    VerdictOut,
)
from staffboard.schemas.common import paginated

router = APIRouter(prefix="/assignments", tags=["assignments"])


def to_out(a: ProjectAssignment) -> AssignmentOut:
    employee = a.employee
    project = a.project
    return AssignmentOut(
        id=str(a.id),
        employee_id=str(a.employee_id),
        employee_name=employee.name if employee else None,
        employee_designation=employee.designation if employee else None,
        department_name=employee.department.name if employee and employee.department else None,
        project_id=str(a.project_id),
        project_name=project.name if project else None,
        project_code=project.project_code if project else None,
        project_status=project.status if project else None,
        role_id=str(a.role_id) if a.role_id else None,
        role_name=a.role.name if a.role else None,
        start_date=a.start_date,
        end_date=a.end_date,
        utilization_percentage=a.utilization_percentage,
        utilization_band=utilization_band(a.utilization_percentage),
        lock_type=a.lock_type,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


def verdict_to_out(v: Verdict) -> VerdictOut:
    return VerdictOut(
        outcome=v.outcome.value,
        accepted=v.accepted,
        findings=[FindingOut(reason=f.reason.value, message=f.message) for f in v.findings],
        projected=UtilizationTotalsOut(
            hard_total=v.projected.hard_total,
            soft_total=v.projected.soft_total,
            combined_total=v.projected.combined_total,
        ),
    )


def to_http(exc: AllocationError) -> HTTPException:
    if isinstance(exc, AllocationRejected):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "reason": exc.reason.value,
                "message": str(exc),
                "verdict": verdict_to_out(exc.verdict).model_dump(mode="json"),
            },
        )
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=f"{exc.kind} not found")
    if isinstance(exc, DuplicateAssignment):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (InvalidRange, InvalidProposal)):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _check_references(db: Session, service: AllocationService, employee_id, project_id, role_id) -> None:
    """Validate foreign references and refresh the project's window in the service calendar."""
    missing = {}
    if not db.get(Employee, employee_id):
        missing["employee_id"] = str(employee_id)
    project = db.get(Project, project_id)
    if not project:
        missing["project_id"] = str(project_id)
    if role_id and not db.get(Role, role_id):
        missing["role_id"] = str(role_id)
    if missing:
        raise HTTPException(status_code=400, detail={"missing": missing})

    service.register_project(project.id, CalendarInterval(project.start_date, project.end_date))


def _to_proposal(payload: AssignmentProposal) -> Proposal:
    return Proposal(
        employee_id=payload.employee_id,
        project_id=payload.project_id,
        role_id=payload.role_id,
        interval=CalendarInterval(payload.start_date, payload.end_date),
        utilization=payload.utilization_percentage,
        lock_type=payload.lock_type,
    )


def _committed_out(db: Session, assignment_id: uuid.UUID, verdict: Verdict) -> AssignmentCommitOut:
    row = db.get(ProjectAssignment, assignment_id)
    db.refresh(row)
    return AssignmentCommitOut(assignment=to_out(row), verdict=verdict_to_out(verdict))


@router.get("")
def list_assignments(
    employee_id: uuid.UUID | None = Query(default=None),
    project_id: uuid.UUID | None = Query(default=None),
    role_id: uuid.UUID | None = Query(default=None),
    lock_type: str | None = Query(default=None, description="hard or soft"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    include_pagination: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    """
    Resource view: assignments with employee, department, project and role names.
    """
    q = db.query(ProjectAssignment)

    if employee_id:
        q = q.filter(ProjectAssignment.employee_id == employee_id)
    if project_id:
        q = q.filter(ProjectAssignment.project_id == project_id)
    if role_id:
        q = q.filter(ProjectAssignment.role_id == role_id)
    if lock_type:
        q = q.filter(ProjectAssignment.lock_type == lock_type)

    total = q.count()
    rows = q.order_by(ProjectAssignment.created_at.desc()).offset(offset).limit(limit).all()
    items = [to_out(r) for r in rows]

    if include_pagination:
        return paginated(items, total=total, limit=limit, offset=offset)
    return items


@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(assignment_id: uuid.UUID, db: Session = Depends(get_db)):
    row = db.get(ProjectAssignment, assignment_id)
    if not row:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return to_out(row)


@router.post("/propose", response_model=VerdictOut)
def propose_assignment(
    payload: AssignmentProposal,
    db: Session = Depends(get_db),
    service: AllocationService = Depends(get_allocation_service),
):
    """Dry run: evaluate the assignment against current commitments without saving it."""
    _check_references(db, service, payload.employee_id, payload.project_id, payload.role_id)
    try:
        verdict = service.propose(
            payload.employee_id,
            payload.project_id,
            payload.role_id,
            CalendarInterval(payload.start_date, payload.end_date),
            payload.utilization_percentage,
            payload.lock_type,
        )
    except AllocationError as exc:
        raise to_http(exc)
    return verdict_to_out(verdict)


@router.post("", response_model=AssignmentCommitOut, status_code=status.HTTP_201_CREATED)
def commit_assignment(
    payload: AssignmentProposal,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    _check_references(db, service, payload.employee_id, payload.project_id, payload.role_id)

    persist = persist_commit(db, actor)
    captured: dict = {}

    def _on_commit(assignment, verdict):
        persist(assignment, verdict)
        captured["verdict"] = verdict

    try:
        assignment_id = service.commit(_to_proposal(payload), on_commit=_on_commit)
    except AllocationError as exc:
        raise to_http(exc)
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Assignment conflicts with stored data")

    return _committed_out(db, assignment_id, captured["verdict"])


@router.patch("/{assignment_id}", response_model=AssignmentCommitOut)
def amend_assignment(
    assignment_id: uuid.UUID,
    payload: AssignmentAmend,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    try:
        current = service.get(assignment_id)
        interval = None
        if payload.start_date or payload.end_date:
            interval = CalendarInterval(
                payload.start_date or current.interval.start,
                payload.end_date or current.interval.end,
            )
        kwargs = {}
        if "role_id" in payload.model_fields_set:
            if payload.role_id and not db.get(Role, payload.role_id):
                raise HTTPException(status_code=400, detail={"missing": {"role_id": str(payload.role_id)}})
            kwargs["role_id"] = payload.role_id

        project = db.get(Project, current.project_id)
        if project:
            service.register_project(project.id, CalendarInterval(project.start_date, project.end_date))

        verdict = service.amend(
            assignment_id,
            interval=interval,
            utilization=payload.utilization_percentage,
            on_change=persist_revision(db, actor, "ASSIGNMENT_AMENDED"),
            **kwargs,
        )
    except AllocationError as exc:
        raise to_http(exc)

    return _committed_out(db, assignment_id, verdict)


@router.put("/{assignment_id}/lock", response_model=AssignmentCommitOut)
def change_lock_type(
    assignment_id: uuid.UUID,
    payload: LockTypeChange,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    try:
        verdict = service.change_lock_type(
            assignment_id,
            payload.lock_type,
            on_change=persist_revision(db, actor, "ASSIGNMENT_LOCK_CHANGED"),
        )
    except AllocationError as exc:
        raise to_http(exc)

    return _committed_out(db, assignment_id, verdict)


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def release_assignment(
    assignment_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    try:
        service.release(assignment_id, on_release=persist_release(db, actor))
    except AllocationError as exc:
        raise to_http(exc)
