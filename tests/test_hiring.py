from fastapi.testclient import TestClient

from staffboard.main import app
from tests.helpers import HEADERS, create_department, create_hiring_requirement


def test_create_hiring_requirement(db_session):
    eng = create_department(db_session, "Engineering")

    client = TestClient(app)
    r = client.post(
        "/hiring-requirements",
        json={
            "position_name": "Backend Engineer",
            "department_id": str(eng.id),
            "number_of_openings": 2,
            "urgency": "urgent",
            "experience_required": "3-5 years",
        },
        headers=HEADERS,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["department_name"] == "Engineering"
    assert body["number_of_openings"] == 2


def test_invalid_urgency_and_openings_are_rejected(db_session):
    client = TestClient(app)
    base = {"position_name": "QA", "experience_required": "1 year"}

    assert client.post("/hiring-requirements", json={**base, "urgency": "asap"}).status_code == 422
    assert client.post("/hiring-requirements", json={**base, "number_of_openings": 0}).status_code == 422


def test_unknown_department_is_bad_request(db_session):
    client = TestClient(app)
    r = client.post(
        "/hiring-requirements",
        json={
            "position_name": "QA",
            "experience_required": "1 year",
            "department_id": "00000000-0000-0000-0000-000000000001",
        },
    )
    assert r.status_code == 400


def test_list_filters_and_urgency_order(db_session):
    eng = create_department(db_session, "Engineering")
    create_hiring_requirement(db_session, "QA Engineer", urgency="normal")
    create_hiring_requirement(db_session, "SRE", urgency="urgent", department=eng)
    create_hiring_requirement(db_session, "Designer", urgency="medium")

    client = TestClient(app)
    r = client.get("/hiring-requirements?order=urgency")
    assert [h["position_name"] for h in r.json()] == ["SRE", "Designer", "QA Engineer"]

    r = client.get("/hiring-requirements?urgency=medium")
    assert [h["position_name"] for h in r.json()] == ["Designer"]

    r = client.get(f"/hiring-requirements?department_id={eng.id}")
    assert [h["position_name"] for h in r.json()] == ["SRE"]


def test_update_and_delete_hiring_requirement(db_session):
    h = create_hiring_requirement(db_session, "QA Engineer")

    client = TestClient(app)
    r = client.patch(f"/hiring-requirements/{h.id}", json={"urgency": "urgent", "number_of_openings": 3})
    assert r.status_code == 200
    assert (r.json()["urgency"], r.json()["number_of_openings"]) == ("urgent", 3)

    assert client.delete(f"/hiring-requirements/{h.id}").status_code == 204
    assert client.get(f"/hiring-requirements/{h.id}").status_code == 404
