import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from staffboard.core.audit import log_event
from staffboard.core.security import get_actor
from staffboard.db.session import get_db
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.models.role import Role
from staffboard.schemas.role import RoleCreate, RoleUpdate, RoleOut

router = APIRouter(prefix="/roles", tags=["roles"])


def to_out(r: Role) -> RoleOut:
    return RoleOut(id=str(r.id), name=r.name, description=r.description, created_at=r.created_at)


@router.get("", response_model=list[RoleOut])
def list_roles(db: Session = Depends(get_db)):
    return [to_out(r) for r in db.query(Role).order_by(Role.name.asc()).all()]


@router.post("", response_model=RoleOut, status_code=status.HTTP_201_CREATED)
def create_role(
    payload: RoleCreate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    r = Role(name=payload.name, description=payload.description)
    db.add(r)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Role name already exists")

    log_event(db=db, actor=actor, action="ROLE_CREATED", entity_type="role", entity_id=r.id,
              metadata={"name": r.name})
    db.commit()
    db.refresh(r)
    return to_out(r)


@router.patch("/{role_id}", response_model=RoleOut)
def update_role(
    role_id: uuid.UUID,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    r = db.get(Role, role_id)
    if not r:
        raise HTTPException(status_code=404, detail="Role not found")

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(r, field, value)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Role name already exists")

    log_event(db=db, actor=actor, action="ROLE_UPDATED", entity_type="role", entity_id=r.id,
              metadata={"name": r.name})
    db.commit()
    db.refresh(r)
    return to_out(r)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: str | None = Depends(get_actor),
):
    r = db.get(Role, role_id)
    if not r:
        raise HTTPException(status_code=404, detail="Role not found")

    # the ledger keeps role ids too, so a referenced role cannot silently vanish
    if db.query(ProjectAssignment.id).filter(ProjectAssignment.role_id == r.id).first():
        raise HTTPException(status_code=409, detail="Role is used by project assignments")

    log_event(db=db, actor=actor, action="ROLE_DELETED", entity_type="role", entity_id=r.id,
              metadata={"name": r.name})
    db.delete(r)
    db.commit()
