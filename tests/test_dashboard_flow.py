"""
학생 대시보드 통합 테스트.
- 대시보드 진행률 / 현재 단계 / 단계별 상태
- 단계 상세(editable) 와 제출 (400 / 404 / 409)
- 프로그램 목록과 등록 (멱등)

"""

import uuid

from app.models.program import Program
from app.models.step import StepType
from app.models.user import Role
from tests.helpers import login_as, make_step


FIELDS = [{"name": "university", "type": "text", "required": True}]


def test_dashboard_progress_and_current_step(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)
    s1 = make_step(db_session, order_index=1, fields=FIELDS, name="신청서")
    s2 = make_step(db_session, order_index=2, step_type=StepType.REVIEW, name="서류 검토")

    r = client.get("/dashboard", headers=headers)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["progress"]["percentage"] == 0
    assert data["progress"]["total_count"] == 2
    assert data["progress"]["current_step"]["id"] == str(s1.id)
    assert [s["status"] for s in data["steps"]] == ["not_started", "not_started"]
    assert [s["step"]["id"] for s in data["steps"]] == [str(s1.id), str(s2.id)]


def test_submit_and_view_step(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, fields=FIELDS)

    detail = client.get(f"/dashboard/steps/{step.id}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["status"] == "not_started"
    assert detail.json()["data"]["editable"] is True
    assert detail.json()["data"]["progress"] is None

    r = client.post(
        f"/dashboard/steps/{step.id}/submit",
        json={"data": {"university": "Universitas Indonesia"}},
        headers=headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["message"] == "Step submitted"
    assert r.json()["data"]["status"] == "in_progress"

    detail = client.get(f"/dashboard/steps/{step.id}", headers=headers)
    body = detail.json()["data"]
    assert body["status"] == "in_progress"
    assert body["editable"] is True
    assert body["progress"]["data"] == {"university": "Universitas Indonesia"}


def test_review_step_locks_after_submit(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)

    first = client.post(f"/dashboard/steps/{step.id}/submit", json={"data": {}}, headers=headers)
    assert first.status_code == 200, first.text
    assert first.json()["data"]["status"] == "pending"

    assert client.get(f"/dashboard/steps/{step.id}", headers=headers).json()["data"]["editable"] is False

    second = client.post(f"/dashboard/steps/{step.id}/submit", json={"data": {}}, headers=headers)
    assert second.status_code == 409
    assert second.json()["detail"] == "Step is awaiting review"


def test_submit_errors(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, fields=FIELDS)

    missing = client.post(f"/dashboard/steps/{step.id}/submit", json={"data": {}}, headers=headers)
    assert missing.status_code == 400
    assert "required" in missing.json()["detail"]

    unknown = client.post(f"/dashboard/steps/{uuid.uuid4()}/submit", json={"data": {}}, headers=headers)
    assert unknown.status_code == 404
    assert unknown.json()["detail"] == "Step not found"

    assert client.get(f"/dashboard/steps/{uuid.uuid4()}", headers=headers).status_code == 404


def test_super_admin_can_use_dashboard(client, db_session):
    _, headers = login_as(client, db_session, Role.SUPER_ADMIN)
    step = make_step(db_session, order_index=1, step_type=StepType.APPROVAL)

    r = client.post(f"/dashboard/steps/{step.id}/submit", json={"data": {}}, headers=headers)
    assert r.status_code == 200, r.text


def test_programs_and_enroll(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)
    active = Program(name="Exchange to Korea", description="1 semester", is_active=True)
    closed = Program(name="Closed Program", is_active=False)
    db_session.add_all([active, closed])
    db_session.commit()

    listed = client.get("/dashboard/programs", headers=headers)
    assert listed.status_code == 200
    assert [p["name"] for p in listed.json()["data"]] == ["Exchange to Korea"]
    assert listed.json()["data"][0]["enrolled"] is False

    first = client.post(f"/dashboard/programs/{active.id}/enroll", headers=headers)
    assert first.status_code == 200, first.text
    again = client.post(f"/dashboard/programs/{active.id}/enroll", headers=headers)
    assert again.status_code == 200
    assert again.json()["data"]["id"] == first.json()["data"]["id"]

    listed = client.get("/dashboard/programs", headers=headers)
    assert listed.json()["data"][0]["enrolled"] is True

    dash = client.get("/dashboard", headers=headers).json()["data"]
    assert [p["name"] for p in dash["enrollments"]] == ["Exchange to Korea"]

    r = client.post(f"/dashboard/programs/{closed.id}/enroll", headers=headers)
    assert r.status_code == 404


def test_profile(client, db_session):
    profile, headers = login_as(client, db_session, Role.USER)

    r = client.get("/dashboard/profile", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"]["id"] == str(profile.id)
    assert r.json()["data"]["role"] == "user"
