from datetime import date

from sqlalchemy.orm import Session

from staffboard.allocation import AllocationRejected, CalendarInterval, Proposal
from staffboard.core.allocation import build_allocation_service, persist_commit
from staffboard.db.base import Base
from staffboard.db.session import SessionLocal, engine
from staffboard.models.department import Department
from staffboard.models.employee import Employee
from staffboard.models.hiring_requirement import HiringRequirement
from staffboard.models.project import Project
from staffboard.models.role import Role


def get_or_create_department(db: Session, name: str) -> Department:
    d = db.query(Department).filter(Department.name == name).one_or_none()
    if d:
        return d
    d = Department(name=name)
    db.add(d)
    db.commit()
    db.refresh(d)
    return d


def get_or_create_role(db: Session, name: str) -> Role:
    r = db.query(Role).filter(Role.name == name).one_or_none()
    if r:
        return r
    r = Role(name=name)
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


def get_or_create_employee(db: Session, code: str, name: str, designation: str, department: Department, manager: Employee | None = None) -> Employee:
    e = db.query(Employee).filter(Employee.employee_code == code).one_or_none()
    if e:
        return e
    e = Employee(
        employee_code=code,
        name=name,
        email=f"{code.lower()}@staffboard.local",
        designation=designation,
        date_of_joining=date(2023, 4, 1),
        department_id=department.id,
        reporting_manager_id=manager.id if manager else None,
    )
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def get_or_create_project(db: Session, code: str, name: str, client: str, start: date, end: date) -> Project:
    p = db.query(Project).filter(Project.project_code == code).one_or_none()
    if p:
        return p
    p = Project(project_code=code, name=name, client_name=client, start_date=start, end_date=end, status="active")
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        # ---- Reference data ----
        engineering = get_or_create_department(db, "Engineering")
        delivery = get_or_create_department(db, "Delivery")
        developer = get_or_create_role(db, "Developer")
        lead = get_or_create_role(db, "Tech Lead")

        manager = get_or_create_employee(db, "EMP001", "Asha Rao", "Engineering Manager", delivery)
        dev_a = get_or_create_employee(db, "EMP002", "Jon Park", "Senior Engineer", engineering, manager)
        dev_b = get_or_create_employee(db, "EMP003", "Mia Lopez", "Engineer", engineering, manager)

        billing = get_or_create_project(db, "PRJ-100", "Billing Revamp", "Northwind", date(2026, 1, 1), date(2026, 6, 30))
        portal = get_or_create_project(db, "PRJ-200", "Partner Portal", "Contoso", date(2026, 3, 1), date(2026, 9, 30))

        if not db.query(HiringRequirement).first():
            db.add(HiringRequirement(
                position_name="Backend Engineer",
                department_id=engineering.id,
                number_of_openings=2,
                urgency="urgent",
                experience_required="3-5 years",
            ))
            db.commit()

        # ---- Allocations, validated like any API call ----
        service = build_allocation_service(db)
        plan = [
            Proposal(dev_a.id, billing.id, lead.id, CalendarInterval(date(2026, 1, 5), date(2026, 4, 30)), 80, "hard"),
            Proposal(dev_a.id, portal.id, developer.id, CalendarInterval(date(2026, 3, 2), date(2026, 5, 29)), 30, "soft"),
            Proposal(dev_b.id, portal.id, developer.id, CalendarInterval(date(2026, 3, 2), date(2026, 9, 30)), 100, "hard"),
        ]
        print("\n=== Demo Seed ===")
        for proposal in plan:
            existing = [a for a in service.assignments_for(proposal.employee_id) if a.project_id == proposal.project_id]
            if existing:
                print(f"  skip   {proposal.employee_id} on {proposal.project_id} (already assigned)")
                continue
            try:
                assignment_id = service.commit(proposal, on_commit=persist_commit(db, "seed@staffboard.local"))
                verdict = service.evaluate(service.get(assignment_id), exclude=assignment_id)
                print(f"  commit {assignment_id}  {proposal.utilization}% {proposal.lock_type.value}  -> {verdict.outcome.value}")
            except AllocationRejected as exc:
                print(f"  reject {proposal.employee_id}: {exc}")

        print("\nEmployees:")
        for e in (manager, dev_a, dev_b):
            print(f"  {e.employee_code}  {e.name:<12} {e.id}")
        print("\nProjects:")
        for p in (billing, portal):
            print(f"  {p.project_code}  {p.name:<16} {p.id}")
        print("\nTry: GET /employees/{id}/load?start_date=2026-01-01&end_date=2026-06-30")
        print()

    finally:
        db.close()


if __name__ == "__main__":
    main()
