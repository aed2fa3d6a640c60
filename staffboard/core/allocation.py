import threading

from fastapi import Depends
from sqlalchemy.orm import Session

from staffboard.allocation import AllocationService, Assignment, CalendarInterval, LockType, Verdict
from staffboard.core.audit import log_event
from staffboard.core.logging import get_logger
from staffboard.db.session import get_db
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment

logger = get_logger(__name__)

_service: AllocationService | None = None
_service_lock = threading.Lock()


def row_to_assignment(row: ProjectAssignment) -> Assignment:
    return Assignment(
        id=row.id,
        employee_id=row.employee_id,
        project_id=row.project_id,
        role_id=row.role_id,
        interval=CalendarInterval(row.start_date, row.end_date),
        utilization=row.utilization_percentage,
        lock_type=LockType(row.lock_type),
    )


def build_allocation_service(db: Session) -> AllocationService:
    """Fresh service whose ledger and project calendar mirror the database."""
    service = AllocationService()
    projects = db.query(Project).all()
    for p in projects:
        service.register_project(p.id, CalendarInterval(p.start_date, p.end_date))
    loaded = service.load(row_to_assignment(r) for r in db.query(ProjectAssignment).all())
    logger.info("allocation_service_hydrated", projects=len(projects), assignments=loaded)
    return service


def get_allocation_service(db: Session = Depends(get_db)) -> AllocationService:
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = build_allocation_service(db)
    return _service


def reset_allocation_service() -> None:
    global _service
    with _service_lock:
        _service = None


def _audit_metadata(a: Assignment, verdict: Verdict | None = None) -> dict:
    meta = {
        "employee_id": str(a.employee_id),
        "project_id": str(a.project_id),
        "role_id": str(a.role_id) if a.role_id else None,
        "start_date": a.interval.start.isoformat(),
        "end_date": a.interval.end.isoformat(),
        "utilization_percentage": a.utilization,
        "lock_type": a.lock_type.value,
    }
    if verdict is not None:
        meta["outcome"] = verdict.outcome.value
        meta["warnings"] = [f.reason.value for f in verdict.warnings]
    return meta


def _commit_or_rollback(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def persist_commit(db: Session, actor: str | None):
    """Hook for AllocationService.commit: insert the row and its audit event."""

    def _hook(a: Assignment, verdict: Verdict) -> None:
        db.add(
            ProjectAssignment(
                id=a.id,
                employee_id=a.employee_id,
                project_id=a.project_id,
                role_id=a.role_id,
                start_date=a.interval.start,
                end_date=a.interval.end,
                utilization_percentage=a.utilization,
                lock_type=a.lock_type.value,
            )
        )
        log_event(
            db=db,
            actor=actor,
            action="ASSIGNMENT_COMMITTED",
            entity_type="project_assignment",
            entity_id=a.id,
            metadata=_audit_metadata(a, verdict),
        )
        _commit_or_rollback(db)

    return _hook


def persist_revision(db: Session, actor: str | None, action: str):
    """Hook for change_lock_type / amend: copy the revised fields onto the row."""

    def _hook(a: Assignment, verdict: Verdict) -> None:
        row = db.get(ProjectAssignment, a.id)
        if row is None:
            raise LookupError(f"Assignment row {a.id} missing from database")
        row.role_id = a.role_id
        row.start_date = a.interval.start
        row.end_date = a.interval.end
        row.utilization_percentage = a.utilization
        row.lock_type = a.lock_type.value
        log_event(
            db=db,
            actor=actor,
            action=action,
            entity_type="project_assignment",
            entity_id=a.id,
            metadata=_audit_metadata(a, verdict),
        )
        _commit_or_rollback(db)

    return _hook


def persist_release(db: Session, actor: str | None):
    def _hook(a: Assignment) -> None:
        row = db.get(ProjectAssignment, a.id)
        if row is not None:
            db.delete(row)
        log_event(
            db=db,
            actor=actor,
            action="ASSIGNMENT_RELEASED",
            entity_type="project_assignment",
            entity_id=a.id,
            metadata=_audit_metadata(a),
        )
        _commit_or_rollback(db)

    return _hook
