import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffboard.allocation import AllocationService, CalendarInterval
from staffboard.core.allocation import get_allocation_service
from staffboard.core.audit import log_event
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.schemas.common import paginated
from staffboard.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut

router = APIRouter(prefix="/projects", tags=["projects"])


def to_out(p: Project) -> ProjectOut:
    return ProjectOut(
        id=str(p.id),
        project_code=p.project_code,
        name=p.name,
        client_name=p.client_name,
        description=p.description,
        start_date=p.start_date,
        end_date=p.end_date,
        status=p.status,
        completion_percentage=p.completion_percentage,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _get_or_404(db: Session, project_id: uuid.UUID) -> Project:
    p = db.get(Project, project_id)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    return p


@router.get("")
def list_projects(
    search: str | None = Query(default=None, description="Search by name, project code or client"),
    status: str | None = Query(default=None, description="Filter by status (active, on_hold, completed)"),
    limit: int = Query(default=100, ge=1, le=500, description="Maximum number of results"),
    offset: int = Query(default=0, ge=0, description="Number of results to skip"),
    include_pagination: bool = Query(default=False, description="Include pagination metadata"),
    db: Session = Depends(get_db),
):
    """
    List projects, newest first.

    Use ?include_pagination=true to get pagination metadata.
    """
    query = db.query(Project)

    if search:
        search_term = f"%{search.lower()}%"
        query = query.filter(
            (Project.name.ilike(search_term))
            | (Project.project_code.ilike(search_term))
            | (Project.client_name.ilike(search_term))
        )
    if status:
        query = query.filter(Project.status == status)

    total = query.count()
    projects = query.order_by(Project.created_at.desc()).offset(offset).limit(limit).all()
    items = [to_out(p) for p in projects]

    if include_pagination:
        return paginated(items, total=total, limit=limit, offset=offset)
    return items


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: uuid.UUID, db: Session = Depends(get_db)):
    return to_out(_get_or_404(db, project_id))


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    p = Project(**payload.model_dump())
    db.add(p)
    try:
        db.flush()  # ensures p.id exists for audit
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Project code already exists")

    log_event(
        db=db,
        actor=actor,
        action="PROJECT_CREATED",
        entity_type="project",
        entity_id=p.id,
        metadata={
            "project_code": p.project_code,
            "start_date": str(p.start_date),
            "end_date": str(p.end_date),
            "status": p.status,
        },
    )
    db.commit()
    db.refresh(p)

    service.register_project(p.id, CalendarInterval(p.start_date, p.end_date))
    return to_out(p)


@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    p = _get_or_404(db, project_id)
    changes = payload.model_dump(exclude_unset=True)

    start = changes.get("start_date") or p.start_date
    end = changes.get("end_date") or p.end_date
    if start > end:
        raise HTTPException(status_code=422, detail="start_date must be on or before end_date")

    for field, value in changes.items():
        if value is None and field not in ("description",):
            continue
        setattr(p, field, value)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Project code already exists")

    log_event(
        db=db,
        actor=actor,
        action="PROJECT_UPDATED",
        entity_type="project",
        entity_id=p.id,
        metadata={"changes": {k: str(v) if v is not None else None for k, v in changes.items()}},
    )
    db.commit()
    db.refresh(p)

    # existing assignments are not re-judged; new proposals see the new window
    service.register_project(p.id, CalendarInterval(p.start_date, p.end_date))
    return to_out(p)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
    service: AllocationService = Depends(get_allocation_service),
):
    p = _get_or_404(db, project_id)

    if db.query(ProjectAssignment.id).filter(ProjectAssignment.project_id == p.id).first():
        raise HTTPException(status_code=409, detail="Project has assignments; release them first")

    log_event(
        db=db,
        actor=actor,
        action="PROJECT_DELETED",
        entity_type="project",
        entity_id=p.id,
        metadata={"project_code": p.project_code},
    )
    db.delete(p)
    db.commit()

    service.unregister_project(p.id)
