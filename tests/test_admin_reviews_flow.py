"""
/admin 리뷰 처리 통합 테스트.

/admin route group 은 role=user 만 통과하므로 (admin role 은 /unauthorized)
리뷰어도 user role 계정으로 로그인한다.

"""

import uuid

from sqlalchemy import select

from app.models.admin_log import AdminActionLog, AdminAction
from app.models.step import StepType
from app.models.user import Role
from tests.helpers import login_as, make_step


def _submit(client, headers, step_id, data=None):
    r = client.post(f"/dashboard/steps/{step_id}/submit", json={"data": data or {}}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()["data"]["id"]


def test_review_list_and_approve(client, db_session):
    student, student_headers = login_as(client, db_session, Role.USER)
    reviewer, reviewer_headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW, name="추천서")
    progress_id = _submit(client, student_headers, step.id)

    listed = client.get("/admin/reviews", headers=reviewer_headers)
    assert listed.status_code == 200, listed.text
    items = listed.json()["data"]
    assert [i["id"] for i in items] == [progress_id]
    assert items[0]["student"]["id"] == str(student.id)
    assert items[0]["step"]["name"] == "추천서"

    detail = client.get(f"/admin/reviews/{progress_id}", headers=reviewer_headers)
    assert detail.status_code == 200
    assert detail.json()["data"]["data"] == {}

    r = client.post(f"/admin/reviews/{progress_id}/approve", json={"notes": "OK"}, headers=reviewer_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Step approved"
    assert body["data"]["status"] == "completed"
    assert body["data"]["admin_notes"] == "OK"
    assert body["data"]["completed_at"] is not None

    # 대기 목록에서 빠지고 completed 필터에 나타남
    assert client.get("/admin/reviews", headers=reviewer_headers).json()["data"] == []
    done = client.get("/admin/reviews", params={"status": "completed"}, headers=reviewer_headers)
    assert [i["id"] for i in done.json()["data"]] == [progress_id]

    log = db_session.scalar(select(AdminActionLog))
    assert log.action == AdminAction.APPROVE_STEP
    assert log.actor_id == reviewer.id

    # 학생 대시보드 진행률 반영
    dash = client.get("/dashboard", headers=student_headers).json()["data"]
    assert dash["progress"]["percentage"] == 100
    assert dash["progress"]["current_step"] is None


def test_reject_then_decide_again_conflicts(client, db_session):
    _, student_headers = login_as(client, db_session, Role.USER)
    _, reviewer_headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, fields=[{"name": "gpa", "type": "text", "required": True}])
    progress_id = _submit(client, student_headers, step.id, {"gpa": "3.8"})

    r = client.post(f"/admin/reviews/{progress_id}/reject", json={"notes": "증빙 필요"}, headers=reviewer_headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["status"] == "rejected"
    assert r.json()["data"]["completed_at"] is None

    again = client.post(f"/admin/reviews/{progress_id}/approve", json={}, headers=reviewer_headers)
    assert again.status_code == 409
    assert again.json()["detail"] == "Progress already rejected"

    # 학생은 반려 사유를 보고 다시 제출할 수 있다
    dash = client.get("/dashboard", headers=student_headers).json()["data"]
    assert dash["steps"][0]["status"] == "rejected"
    assert dash["steps"][0]["admin_notes"] == "증빙 필요"
    _submit(client, student_headers, step.id, {"gpa": "3.9"})


def test_unknown_review(client, db_session):
    _, headers = login_as(client, db_session, Role.USER)

    assert client.get(f"/admin/reviews/{uuid.uuid4()}", headers=headers).status_code == 404
    r = client.post(f"/admin/reviews/{uuid.uuid4()}/approve", json={}, headers=headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Progress not found"


def test_overview_and_students(client, db_session):
    student, student_headers = login_as(client, db_session, Role.USER)
    step = make_step(db_session, order_index=1, step_type=StepType.APPROVAL)
    _submit(client, student_headers, step.id)

    overview = client.get("/admin", headers=student_headers)
    assert overview.status_code == 200
    data = overview.json()["data"]
    assert len(data["pending_reviews"]) == 1
    assert data["active_students"] == 1
    assert data["total_students"] == 1

    students = client.get("/admin/students", headers=student_headers)
    assert students.status_code == 200
    row = students.json()["data"][0]
    assert row["id"] == str(student.id)
    assert row["progress"]["total_count"] == 1
    assert row["progress"]["completed_count"] == 0


def test_admin_role_cannot_review(client, db_session):
    _, headers = login_as(client, db_session, Role.ADMIN)

    r = client.get("/admin/reviews", headers=headers)
    assert r.status_code == 303
    assert r.headers["location"] == "/unauthorized"
