from datetime import date

from fastapi.testclient import TestClient

from staffboard.main import app
from staffboard.models.project_assignment import ProjectAssignment
from tests.helpers import (
    HEADERS,
    commit_assignment,
    create_department,
    create_employee,
    create_project,
    create_role,
)


def body(employee, project, start, end, utilization, lock_type="hard", role=None):
    return {
        "employee_id": str(employee.id),
        "project_id": str(project.id),
        "role_id": str(role.id) if role else None,
        "start_date": start,
        "end_date": end,
        "utilization_percentage": utilization,
        "lock_type": lock_type,
    }


def test_propose_on_free_employee_is_accepted(db_session):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)

    client = TestClient(app)
    r = client.post("/assignments/propose", json=body(dev, project, "2026-01-01", "2026-01-31", 100))
    assert r.status_code == 200
    verdict = r.json()
    assert verdict["outcome"] == "accepted"
    assert verdict["accepted"] is True
    assert verdict["projected"]["hard_total"] == 100
    # a dry run stores nothing
    assert db_session.query(ProjectAssignment).count() == 0


def test_propose_reports_rejection_without_error(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    alpha = create_project(db_session, "PRJ-A")
    beta = create_project(db_session, "PRJ-B", end=date(2026, 2, 28))
    commit_assignment(db_session, allocation_service, dev, alpha, date(2026, 1, 1), date(2026, 1, 31), 80)

    client = TestClient(app)
    r = client.post("/assignments/propose", json=body(dev, beta, "2026-01-15", "2026-02-15", 30))
    assert r.status_code == 200
    assert r.json()["outcome"] == "rejected"
    assert r.json()["findings"][0]["reason"] == "capacity_exceeded"

    r = client.post("/assignments/propose", json=body(dev, beta, "2026-01-15", "2026-02-15", 30, "soft"))
    assert r.json()["outcome"] == "accepted_with_warning"
    assert r.json()["findings"][0]["reason"] == "soft_overcommit"


def test_commit_returns_assignment_and_verdict(db_session):
    eng = create_department(db_session, "Engineering")
    dev = create_employee(db_session, "E001", "Dev", department=eng)
    role = create_role(db_session, "Developer")
    project = create_project(db_session, "PRJ-1", end=date(2026, 2, 28))

    client = TestClient(app)
    r = client.post(
        "/assignments",
        json=body(dev, project, "2026-02-01", "2026-03-15", 90, role=role),
        headers=HEADERS,
    )
    assert r.status_code == 201
    out = r.json()
    assignment = out["assignment"]
    assert assignment["employee_name"] == "Dev"
    assert assignment["department_name"] == "Engineering"
    assert assignment["project_code"] == "PRJ-1"
    assert assignment["role_name"] == "Developer"
    assert assignment["utilization_band"] == "high"
    assert out["verdict"]["outcome"] == "accepted_with_warning"
    assert out["verdict"]["findings"][0]["reason"] == "outside_project_window"

    audit = client.get(f"/audit?entity_id={assignment['id']}").json()
    assert audit[0]["action"] == "ASSIGNMENT_COMMITTED"
    assert audit[0]["metadata"]["warnings"] == ["outside_project_window"]


def test_commit_over_hard_capacity_is_conflict(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    commit_assignment(db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 80)

    client = TestClient(app)
    r = client.post("/assignments", json=body(dev, project, "2026-01-15", "2026-02-15", 30))
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["reason"] == "capacity_exceeded"
    assert detail["verdict"]["projected"]["hard_total"] == 110
    assert db_session.query(ProjectAssignment).count() == 1


def test_commit_with_missing_references_is_bad_request(db_session):
    dev = create_employee(db_session, "E001", "Dev")

    client = TestClient(app)
    payload = body(dev, dev, "2026-01-01", "2026-01-31", 10)
    r = client.post("/assignments", json=payload)
    assert r.status_code == 400
    assert "project_id" in r.json()["detail"]["missing"]


def test_invalid_payloads_are_unprocessable(db_session):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)

    client = TestClient(app)
    assert client.post("/assignments", json=body(dev, project, "2026-02-01", "2026-01-01", 10)).status_code == 422
    assert client.post("/assignments", json=body(dev, project, "2026-01-01", "2026-01-31", 101)).status_code == 422
    assert client.post("/assignments", json=body(dev, project, "2026-01-01", "2026-01-31", 10, "firm")).status_code == 422


def test_list_assignments_with_filters(db_session, allocation_service):
    alice = create_employee(db_session, "E001", "Alice")
    bob = create_employee(db_session, "E002", "Bob")
    project = create_project(db_session)
    commit_assignment(db_session, allocation_service, alice, project, date(2026, 1, 1), date(2026, 1, 31), 50)
    commit_assignment(
        db_session, allocation_service, bob, project, date(2026, 1, 1), date(2026, 1, 31), 40, lock_type="soft"
    )

    client = TestClient(app)
    r = client.get("/assignments")
    assert len(r.json()) == 2

    r = client.get(f"/assignments?employee_id={alice.id}")
    assert [a["employee_name"] for a in r.json()] == ["Alice"]

    r = client.get("/assignments?lock_type=soft&include_pagination=true")
    page = r.json()
    assert page["pagination"]["total"] == 1
    assert page["items"][0]["employee_name"] == "Bob"


def test_lock_upgrade_rejected_leaves_row_soft(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    commit_assignment(db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 80)
    soft = commit_assignment(
        db_session, allocation_service, dev, project, date(2026, 1, 15), date(2026, 2, 15), 30, lock_type="soft"
    )

    client = TestClient(app)
    r = client.put(f"/assignments/{soft.id}/lock", json={"lock_type": "hard"})
    assert r.status_code == 409
    assert r.json()["detail"]["reason"] == "capacity_exceeded"
    assert client.get(f"/assignments/{soft.id}").json()["lock_type"] == "soft"


def test_lock_change_persists(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    row = commit_assignment(
        db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 40, lock_type="soft"
    )

    client = TestClient(app)
    r = client.put(f"/assignments/{row.id}/lock", json={"lock_type": "hard"}, headers=HEADERS)
    assert r.status_code == 200
    assert r.json()["assignment"]["lock_type"] == "hard"
    assert allocation_service.get(row.id).lock_type.value == "hard"


def test_amend_assignment(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    row = commit_assignment(db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 40)

    client = TestClient(app)
    r = client.patch(
        f"/assignments/{row.id}",
        json={"end_date": "2026-02-28", "utilization_percentage": 60},
        headers=HEADERS,
    )
    assert r.status_code == 200
    amended = r.json()["assignment"]
    assert (amended["start_date"], amended["end_date"]) == ("2026-01-01", "2026-02-28")
    assert amended["utilization_percentage"] == 60

    r = client.patch(f"/assignments/{row.id}", json={"start_date": "2026-03-01"})
    assert r.status_code == 422


def test_amend_over_capacity_is_conflict(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    commit_assignment(db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 70)
    feb = commit_assignment(db_session, allocation_service, dev, project, date(2026, 2, 1), date(2026, 2, 28), 50)

    client = TestClient(app)
    r = client.patch(f"/assignments/{feb.id}", json={"start_date": "2026-01-20"})
    assert r.status_code == 409
    assert client.get(f"/assignments/{feb.id}").json()["start_date"] == "2026-02-01"


def test_release_frees_capacity(db_session, allocation_service):
    dev = create_employee(db_session, "E001", "Dev")
    project = create_project(db_session)
    row = commit_assignment(db_session, allocation_service, dev, project, date(2026, 1, 1), date(2026, 1, 31), 100)

    client = TestClient(app)
    proposal = body(dev, project, "2026-01-10", "2026-01-20", 50)
    assert client.post("/assignments/propose", json=proposal).json()["outcome"] == "rejected"

    r = client.delete(f"/assignments/{row.id}", headers=HEADERS)
    assert r.status_code == 204
    assert client.get(f"/assignments/{row.id}").status_code == 404
    assert client.post("/assignments/propose", json=proposal).json()["outcome"] == "accepted"

    assert client.delete(f"/assignments/{row.id}").status_code == 404
