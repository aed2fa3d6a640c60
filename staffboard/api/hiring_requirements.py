import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from staffboard.core.audit import log_event
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.department import Department
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.schemas.hiring_requirement import (
    HiringRequirementCreate,
    HiringRequirementOut,
    HiringRequirementUpdate,
)

router = APIRouter(prefix="/hiring-requirements", tags=["hiring"])

# sort order for ?order=urgency, most pressing first
URGENCY_RANK = {"urgent": 0, "medium": 1, "normal": 2}


def to_out(h: HiringRequirement) -> HiringRequirementOut:
    return HiringRequirementOut(
        id=str(h.id),
        position_name=h.position_name,
        department_id=str(h.department_id) if h.department_id else None,
        department_name=h.department.name if h.department else None,
        number_of_openings=h.number_of_openings,
        urgency=h.urgency,
        experience_required=h.experience_required,
        job_description=h.job_description,
        job_document_url=h.job_document_url,
        created_at=h.created_at,
        updated_at=h.updated_at,
    )


def _get_or_404(db: Session, requirement_id: uuid.UUID) -> HiringRequirement:
    h = db.get(HiringRequirement, requirement_id)
    if not h:
        raise HTTPException(status_code=404, detail="Hiring requirement not found")
    return h


def _check_department(db: Session, department_id: uuid.UUID | None) -> None:
    if department_id and not db.get(Department, department_id):
        raise HTTPException(status_code=400, detail={"missing_department_id": str(department_id)})


@router.get("", response_model=list[HiringRequirementOut])
def list_hiring_requirements(
    urgency: str | None = Query(default=None, description="Filter by urgency (normal, medium, urgent)"),
    department_id: uuid.UUID | None = Query(default=None),
    order: str = Query(default="recent", pattern="^(recent|urgency)$"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    q = db.query(HiringRequirement)
    if urgency:
        q = q.filter(HiringRequirement.urgency == urgency)
    if department_id:
        q = q.filter(HiringRequirement.department_id == department_id)

    rows = q.order_by(HiringRequirement.created_at.desc()).all()
    if order == "urgency":
        # stable sort keeps newest-first inside each urgency level
        rows.sort(key=lambda h: URGENCY_RANK.get(h.urgency, len(URGENCY_RANK)))
    return [to_out(h) for h in rows[:limit]]


@router.get("/{requirement_id}", response_model=HiringRequirementOut)
def get_hiring_requirement(requirement_id: uuid.UUID, db: Session = Depends(get_db)):
    return to_out(_get_or_404(db, requirement_id))


@router.post("", response_model=HiringRequirementOut, status_code=status.HTTP_201_CREATED)
def create_hiring_requirement(
    payload: HiringRequirementCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    _check_department(db, payload.department_id)

    h = HiringRequirement(**payload.model_dump())
    db.add(h)
    db.flush()

    log_event(
        db=db,
        actor=actor,
        action="HIRING_REQUIREMENT_CREATED",
        entity_type="hiring_requirement",
        entity_id=h.id,
        metadata={"position_name": h.position_name, "openings": h.number_of_openings, "urgency": h.urgency},
    )
    db.commit()
    db.refresh(h)
    return to_out(h)


@router.patch("/{requirement_id}", response_model=HiringRequirementOut)
def update_hiring_requirement(
    requirement_id: uuid.UUID,
    payload: HiringRequirementUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    h = _get_or_404(db, requirement_id)
    changes = payload.model_dump(exclude_unset=True)
    if "department_id" in changes:
        _check_department(db, changes["department_id"])

    for field, value in changes.items():
        if value is None and field in ("position_name", "number_of_openings", "urgency", "experience_required"):
            continue
        setattr(h, field, value)

    log_event(
        db=db,
        actor=actor,
        action="HIRING_REQUIREMENT_UPDATED",
        entity_type="hiring_requirement",
        entity_id=h.id,
        metadata={"changes": {k: str(v) if v is not None else None for k, v in changes.items()}},
    )
    db.commit()
    db.refresh(h)
    return to_out(h)


@router.delete("/{requirement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_hiring_requirement(
    requirement_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    h = _get_or_404(db, requirement_id)
    log_event(
        db=db,
        actor=actor,
        action="HIRING_REQUIREMENT_DELETED",
        entity_type="hiring_requirement",
        entity_id=h.id,
        metadata={"position_name": h.position_name},
    )
    db.delete(h)
    db.commit()
