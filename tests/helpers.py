from datetime import date

from sqlalchemy.orm import Session

from staffboard.allocation import AllocationService, CalendarInterval, Proposal
from staffboard.core.allocation import persist_commit
from staffboard.models.department import Department
from staffboard.models.employee import Employee
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.models.project import Project
from staffboard.models.project_assignment import ProjectAssignment
from staffboard.models.role import Role

HEADERS = {"X-User-Email": "planner@local.test"}


def create_department(db: Session, name: str = "Engineering") -> Department:
    d = Department(name=name)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


def create_role(db: Session, name: str = "Developer") -> Role:
    r = Role(name=name)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def create_employee(
    db: Session,
    code: str,
    name: str,
    *,
    department: Department | None = None,
    manager: Employee | None = None,
    designation: str = "Engineer",
) -> Employee:
    e = Employee(
        employee_code=code,
        name=name,
        email=f"{code.lower()}@test.local",
        designation=designation,
        date_of_joining=date(2024, 1, 15),
        department_id=department.id if department else None,
        reporting_manager_id=manager.id if manager else None,
    )
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def create_project(
    db: Session,
    code: str = "PRJ-1",
    *,
    start: date = date(2026, 1, 1),
    end: date = date(2026, 12, 31),
    status: str = "active",
    service: AllocationService | None = None,
) -> Project:
    p = Project(
        project_code=code,
        name=f"Project {code}",
        client_name="Acme",
        start_date=start,
        end_date=end,
        status=status,
        completion_percentage=0,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    if service is not None:
        service.register_project(p.id, CalendarInterval(p.start_date, p.end_date))
    return p


def create_hiring_requirement(db: Session, position: str = "QA Engineer", *, urgency: str = "normal", openings: int = 1, department: Department | None = None) -> HiringRequirement:
    h = HiringRequirement(
        position_name=position,
        number_of_openings=openings,
        urgency=urgency,
        experience_required="2+ years",
        department_id=department.id if department else None,
    )
    db.add(h)
    db.commit()
    db.refresh(h)
    return h


def commit_assignment(
    db: Session,
    service: AllocationService,
    employee: Employee,
    project: Project,
    start: date,
    end: date,
    utilization: int,
    lock_type: str = "hard",
    role: Role | None = None,
) -> ProjectAssignment:
    """Commit through the service so the ledger and the table stay in step."""
    service.register_project(project.id, CalendarInterval(project.start_date, project.end_date))
    assignment_id = service.commit(
        Proposal(
            employee.id,
            project.id,
            role.id if role else None,
            CalendarInterval(start, end),
            utilization,
            lock_type,
        ),
        on_commit=persist_commit(db, None),
    )
    return db.get(ProjectAssignment, assignment_id)
