import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffboard.core.audit import log_event
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.department import Department
from staffboard.models.employee import Employee
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.schemas.department import DepartmentCreate, DepartmentUpdate, DepartmentOut

router = APIRouter(prefix="/departments", tags=["departments"])


def to_out(d: Department) -> DepartmentOut:
    return DepartmentOut(id=str(d.id), name=d.name, description=d.description, created_at=d.created_at)


def _get_or_404(db: Session, department_id: uuid.UUID) -> Department:
    d = db.get(Department, department_id)
    if not d:
        raise HTTPException(status_code=404, detail="Department not found")
    return d


@router.get("", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db)):
    rows = db.query(Department).order_by(Department.name.asc()).all()
    return [to_out(d) for d in rows]


@router.post("", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    d = Department(name=payload.name, description=payload.description)
    db.add(d)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Department name already exists")

    log_event(db=db, actor=actor, action="DEPARTMENT_CREATED", entity_type="department", entity_id=d.id,
              metadata={"name": d.name})
    db.commit()
    db.refresh(d)
    return to_out(d)


@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: uuid.UUID,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    d = _get_or_404(db, department_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(d, field, value)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Department name already exists")

    log_event(db=db, actor=actor, action="DEPARTMENT_UPDATED", entity_type="department", entity_id=d.id,
              metadata={"changes": {k: str(v) if v is not None else None for k, v in changes.items()}})
    db.commit()
    db.refresh(d)
    return to_out(d)


@router.delete("/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_department(
    department_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    d = _get_or_404(db, department_id)

    in_use = (
        db.query(Employee.id).filter(Employee.department_id == d.id).first()
        or db.query(HiringRequirement.id).filter(HiringRequirement.department_id == d.id).first()
    )
    if in_use:
        raise HTTPException(status_code=409, detail="Department is referenced by employees or hiring requirements")

    log_event(db=db, actor=actor, action="DEPARTMENT_DELETED", entity_type="department", entity_id=d.id,
              metadata={"name": d.name})
    db.delete(d)
    db.commit()
