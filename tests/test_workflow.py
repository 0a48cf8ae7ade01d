"""
단계 진행 상태 머신 테스트 (서비스 계층).

- 제출: 단계 유형별 목표 상태, 같은 (학생, 단계) 행 재사용
- 완료/대기 상태 보호, 반려 후 재제출 설정
- 관리자 승인/반려 결과와 중복 처리 거부
- 입력 필드 검증, 존재하지 않는 참조

"""

import datetime
import uuid

import pytest
from sqlalchemy import select, func

from app.core.config import settings
from app.core.errors import DanglingReference, InvalidTransition, SubmissionInvalid
from app.models.admin_log import AdminActionLog, AdminAction
from app.models.step import StepType, UserStepProgress, ProgressStatus
from app.models.user import Role
from app.services.workflow import (
    submit_step,
    approve_progress,
    reject_progress,
    progress_state,
    is_editable,
    NotStarted,
    Rejected,
)
from tests.helpers import create_account_in_db, make_step


NOW = datetime.datetime(2026, 3, 2, 9, 30, tzinfo=datetime.timezone.utc)

PASSPORT_FIELDS = [
    {"name": "passport_no", "type": "text", "required": True},
    {"name": "note", "type": "textarea"},
    {"name": "semester", "type": "select", "options": ["spring", "fall"]},
]


@pytest.fixture()
def student(db_session):
    return create_account_in_db(db_session, role=Role.USER)


@pytest.fixture()
def admin(db_session):
    return create_account_in_db(db_session, role=Role.ADMIN)


def _count_rows(db, *, user_id, step_id) -> int:
    return db.scalar(
        select(func.count())
        .select_from(UserStepProgress)
        .where(UserStepProgress.user_id == user_id, UserStepProgress.step_id == step_id)
    )


def test_form_submission_is_in_progress(db_session, student):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)

    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "M1234567"})
    db_session.commit()

    assert row.status == ProgressStatus.IN_PROGRESS
    assert row.data == {"passport_no": "M1234567"}
    assert row.completed_at is None


@pytest.mark.parametrize("step_type", [StepType.REVIEW, StepType.APPROVAL])
def test_review_submission_is_pending(db_session, student, step_type):
    step = make_step(db_session, order_index=1, step_type=step_type)

    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})

    assert row.status == ProgressStatus.PENDING


def test_resubmission_updates_same_row(db_session, student):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)

    first = submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "A1"})
    db_session.commit()
    second = submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "B2"})
    db_session.commit()

    assert first.id == second.id
    assert second.data == {"passport_no": "B2"}
    assert _count_rows(db_session, user_id=student.id, step_id=step.id) == 1


def test_completed_step_is_read_only(db_session, student, admin):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "A1"})
    approve_progress(db_session, progress_id=row.id, notes=None, actor_id=admin.id)
    db_session.commit()

    with pytest.raises(InvalidTransition):
        submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "CHANGED"})
    db_session.rollback()

    db_session.refresh(row)
    assert row.status == ProgressStatus.COMPLETED
    assert row.data == {"passport_no": "A1"}


def test_pending_step_cannot_be_resubmitted(db_session, student):
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)
    submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    db_session.commit()

    with pytest.raises(InvalidTransition):
        submit_step(db_session, user_id=student.id, step_id=step.id, data={})


def test_approve_pending_with_notes(db_session, student, admin):
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    db_session.commit()

    decided = approve_progress(db_session, progress_id=row.id, notes="OK", actor_id=admin.id, now=NOW)
    db_session.commit()

    assert decided.status == ProgressStatus.COMPLETED
    assert decided.admin_notes == "OK"
    stamped = decided.completed_at
    # SQLite 는 tz 정보 없이 돌려준다
    if stamped.tzinfo is None:
        stamped = stamped.replace(tzinfo=datetime.timezone.utc)
    assert stamped == NOW


def test_reject_in_progress(db_session, student, admin):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={"passport_no": "A1"})
    db_session.commit()

    decided = reject_progress(db_session, progress_id=row.id, notes="사진이 흐립니다", actor_id=admin.id)
    db_session.commit()

    assert decided.status == ProgressStatus.REJECTED
    assert decided.completed_at is None
    assert decided.admin_notes == "사진이 흐립니다"


def test_decision_writes_admin_log(db_session, student, admin):
    step = make_step(db_session, order_index=1, step_type=StepType.APPROVAL)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    approve_progress(db_session, progress_id=row.id, notes="good", actor_id=admin.id)
    db_session.commit()

    log = db_session.scalar(select(AdminActionLog))
    assert log.action == AdminAction.APPROVE_STEP
    assert log.actor_id == admin.id
    assert log.target_user_id == student.id
    assert log.progress_id == row.id
    assert (log.before_value, log.after_value) == ("pending", "completed")


def test_second_decision_is_refused(db_session, student, admin):
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    approve_progress(db_session, progress_id=row.id, notes=None, actor_id=admin.id)
    db_session.commit()

    with pytest.raises(InvalidTransition, match="already completed"):
        reject_progress(db_session, progress_id=row.id, notes="late", actor_id=admin.id)
    db_session.rollback()

    db_session.refresh(row)
    assert row.status == ProgressStatus.COMPLETED
    assert db_session.scalar(select(func.count()).select_from(AdminActionLog)) == 1


def test_rejected_step_can_be_resubmitted(db_session, student, admin):
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    reject_progress(db_session, progress_id=row.id, notes="missing", actor_id=admin.id)
    db_session.commit()

    assert is_editable(progress_state(row))

    again = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    db_session.commit()

    assert again.id == row.id
    assert again.status == ProgressStatus.PENDING
    # 반려 사유는 다음 결정 전까지 유지
    assert again.admin_notes == "missing"


def test_rejected_step_locked_when_resubmit_disabled(db_session, student, admin, monkeypatch):
    monkeypatch.setattr(settings, "ALLOW_RESUBMIT_AFTER_REJECTION", False)
    step = make_step(db_session, order_index=1, step_type=StepType.REVIEW)
    row = submit_step(db_session, user_id=student.id, step_id=step.id, data={})
    reject_progress(db_session, progress_id=row.id, notes=None, actor_id=admin.id)
    db_session.commit()

    state = progress_state(row)
    assert isinstance(state, Rejected)
    assert not is_editable(state)

    with pytest.raises(InvalidTransition, match="rejected"):
        submit_step(db_session, user_id=student.id, step_id=step.id, data={})


def test_missing_row_is_not_started():
    state = progress_state(None)
    assert isinstance(state, NotStarted)
    assert state.status == "not_started"
    assert is_editable(state)


def test_unknown_step_or_user(db_session, student):
    with pytest.raises(DanglingReference, match="Step not found"):
        submit_step(db_session, user_id=student.id, step_id=uuid.uuid4(), data={})

    step = make_step(db_session, order_index=1)
    with pytest.raises(DanglingReference, match="User not found"):
        submit_step(db_session, user_id=uuid.uuid4(), step_id=step.id, data={})


def test_inactive_step_cannot_be_submitted(db_session, student):
    step = make_step(db_session, order_index=1, is_active=False)

    with pytest.raises(DanglingReference):
        submit_step(db_session, user_id=student.id, step_id=step.id, data={})


def test_unknown_progress_decision(db_session, admin):
    with pytest.raises(DanglingReference, match="Progress not found"):
        approve_progress(db_session, progress_id=uuid.uuid4(), notes=None, actor_id=admin.id)


@pytest.mark.parametrize(
    "data, message",
    [
        ({}, "'passport_no' is required"),
        ({"passport_no": "   "}, "'passport_no' is required"),
        ({"passport_no": "A1", "nickname": "x"}, "Unknown fields: nickname"),
        ({"passport_no": "A1", "semester": "winter"}, "must be one of"),
        ({"passport_no": ["A1", "B2"]}, "single value"),
    ],
)
def test_invalid_submission_data(db_session, student, data, message):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)

    with pytest.raises(SubmissionInvalid, match=message):
        submit_step(db_session, user_id=student.id, step_id=step.id, data=data)

    assert _count_rows(db_session, user_id=student.id, step_id=step.id) == 0


def test_empty_optional_fields_are_dropped(db_session, student):
    step = make_step(db_session, order_index=1, fields=PASSPORT_FIELDS)

    row = submit_step(
        db_session,
        user_id=student.id,
        step_id=step.id,
        data={"passport_no": "A1", "note": "", "semester": "fall"},
    )

    assert row.data == {"passport_no": "A1", "semester": "fall"}
