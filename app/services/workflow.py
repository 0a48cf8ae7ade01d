"""
services/workflow.py

학생 단계 진행(Step Progress) 상태 머신.

상태:
    NotStarted ──학생 제출(form/upload)──────▶ InProgress ─┐
        │                                                   ├─관리자 승인─▶ Completed
        └────────학생 제출(review/approval)─▶ Pending ──────┤
                                                            └─관리자 반려─▶ Rejected

- 진행 레코드가 없으면 NotStarted 로 취급한다. (DB 값이 아님)
- InProgress 상태에서 다시 제출하면 data 만 덮어쓴다.
- Pending 은 관리자 처리 전까지 학생이 수정할 수 없다.
- Completed 는 학생 제출로 절대 바뀌지 않는다. (읽기 전용)
- Rejected 는 ALLOW_RESUBMIT_AFTER_REJECTION 설정에 따라 재제출 가능
- 관리자 승인/반려는 Pending / InProgress 에서만 가능

설계 원칙:
- HTTP / FastAPI 의존성 없음, 실패는 app.core.errors 예외로 알림
- 트랜잭션 제어(commit/rollback)는 라우터에서 수행
- 관리자 결정은 조건부 UPDATE 로 적용하여 동시 처리 시 한 건만 성공

관련 파일:
- app.models.step          : Step / UserStepProgress / ProgressStatus
- app.services.admin_log   : 관리자 결정 감사 로그
- app.routers.dashboard    : 학생 제출
- app.routers.admin        : 관리자 승인/반려

"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Union

from pydantic import ValidationError
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import DanglingReference, InvalidTransition, SubmissionInvalid
from app.models.admin_log import AdminAction
from app.models.step import Step, StepType, UserStepProgress, ProgressStatus
from app.models.user import Profile, utcnow
from app.schemas.step import FormFieldsSchema
from app.services.admin_log import write_admin_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotStarted:
    status: ClassVar[str] = "not_started"


@dataclass(frozen=True)
class InProgress:
    data: dict
    updated_at: datetime
    status: ClassVar[str] = ProgressStatus.IN_PROGRESS.value


@dataclass(frozen=True)
class Pending:
    data: dict
    status: ClassVar[str] = ProgressStatus.PENDING.value


@dataclass(frozen=True)
class Completed:
    completed_at: datetime | None
    notes: str | None
    status: ClassVar[str] = ProgressStatus.COMPLETED.value


@dataclass(frozen=True)
class Rejected:
    notes: str | None
    status: ClassVar[str] = ProgressStatus.REJECTED.value


ProgressState = Union[NotStarted, InProgress, Pending, Completed, Rejected]

# 관리자 승인/반려가 가능한 상태
DECIDABLE_STATUSES = (ProgressStatus.PENDING, ProgressStatus.IN_PROGRESS)


def progress_state(row: UserStepProgress | None) -> ProgressState:
    if row is None:
        return NotStarted()
    if row.status == ProgressStatus.IN_PROGRESS:
        return InProgress(data=dict(row.data or {}), updated_at=row.updated_at)
    if row.status == ProgressStatus.PENDING:
        return Pending(data=dict(row.data or {}))
    if row.status == ProgressStatus.COMPLETED:
        return Completed(completed_at=row.completed_at, notes=row.admin_notes)
    return Rejected(notes=row.admin_notes)


# review / approval 단계는 제출 즉시 관리자 대기(pending)
def submission_status(step: Step) -> ProgressStatus:
    if step.step_type in (StepType.REVIEW, StepType.APPROVAL):
        return ProgressStatus.PENDING
    return ProgressStatus.IN_PROGRESS


def is_editable(state: ProgressState) -> bool:
    if isinstance(state, (NotStarted, InProgress)):
        return True
    if isinstance(state, Rejected):
        return settings.ALLOW_RESUBMIT_AFTER_REJECTION
    return False


def _ensure_student_may_submit(state: ProgressState) -> None:
    if isinstance(state, Completed):
        raise InvalidTransition("Step already completed")
    if isinstance(state, Pending):
        raise InvalidTransition("Step is awaiting review")
    if isinstance(state, Rejected) and not settings.ALLOW_RESUBMIT_AFTER_REJECTION:
        raise InvalidTransition("Step was rejected")


"""
단계 입력값 검증

- 단계에 정의되지 않은 필드는 거부
- required 필드는 값이 있어야 함 (공백 문자열 불가)
- select 필드는 options 중 하나여야 함
- 값은 문자열/숫자/불리언 같은 단일 값만 허용 (file 필드는 파일 이름)
- 비어 있는 선택 필드는 저장하지 않음

"""

def validate_submission(step: Step, data: dict[str, Any]) -> dict[str, Any]:
    try:
        schema = FormFieldsSchema.model_validate(step.form_fields or {})
    except ValidationError:
        logger.error("step %s has an invalid field configuration", step.id, extra={"step_id": step.id})
        raise SubmissionInvalid("Step field configuration is invalid")

    fields = {f.name: f for f in schema.fields}

    unknown = sorted(set(data) - set(fields))
    if unknown:
        raise SubmissionInvalid(f"Unknown fields: {', '.join(unknown)}")

    cleaned: dict[str, Any] = {}
    for field in schema.fields:
        value = data.get(field.name)

        if value is None or (isinstance(value, str) and not value.strip()):
            if field.required:
                raise SubmissionInvalid(f"Field '{field.name}' is required")
            continue

        if not isinstance(value, (str, int, float, bool)):
            raise SubmissionInvalid(f"Field '{field.name}' must be a single value")

        if field.type == "select" and value not in (field.options or []):
            raise SubmissionInvalid(f"Field '{field.name}' must be one of: {', '.join(field.options or [])}")

        cleaned[field.name] = value
    return cleaned


def get_progress(db: Session, *, user_id: uuid.UUID, step_id: uuid.UUID) -> UserStepProgress | None:
    return db.scalar(
        select(UserStepProgress)
        .where(UserStepProgress.user_id == user_id)
        .where(UserStepProgress.step_id == step_id)
    )


"""
학생 단계 제출

- step / user 가 존재해야 함 (비활성 단계도 제출 불가)
- 진행 레코드가 없으면 생성, 있으면 같은 행을 갱신 (중복 행 생성 없음)
- form / upload → in_progress, review / approval → pending
- 완료/대기 상태에서는 InvalidTransition, 이때 기존 행은 변경되지 않음

"""

def submit_step(
    db: Session,
    *,
    user_id: uuid.UUID,
    step_id: uuid.UUID,
    data: dict[str, Any],
    now: datetime | None = None,
) -> UserStepProgress:
    step = db.get(Step, step_id)
    if not step or not step.is_active:
        raise DanglingReference("Step not found")

    if not db.get(Profile, user_id):
        raise DanglingReference("User not found")

    row = get_progress(db, user_id=user_id, step_id=step_id)
    state = progress_state(row)

    try:
        _ensure_student_may_submit(state)
    except InvalidTransition:
        logger.warning(
            "submission refused: %s -> %s",
            state.status, submission_status(step).value,
            extra={"user_id": user_id, "step_id": step_id, "status": state.status},
        )
        raise

    cleaned = validate_submission(step, data)
    target = submission_status(step)
    now = now or utcnow()

    if row is None:
        row = UserStepProgress(
            user_id=user_id,
            step_id=step_id,
            status=target,
            data=cleaned,
            created_at=now,
            updated_at=now,
            completed_at=None,
        )
        db.add(row)
    else:
        row.status = target
        row.data = cleaned
        row.updated_at = now
        row.completed_at = None

    db.flush()

    logger.info(
        "step submitted: %s -> %s", state.status, target.value,
        extra={"user_id": user_id, "step_id": step_id, "progress_id": row.id, "status": target.value},
    )
    return row


"""
관리자 승인/반려

- 승인: completed, completed_at = now, admin_notes = notes
- 반려: rejected, completed_at = None, admin_notes = notes
- pending / in_progress 에서만 가능

동시 처리:
- WHERE status IN (pending, in_progress) 조건부 UPDATE 로 적용
- 다른 관리자가 먼저 처리했다면 갱신 행 수가 0 → InvalidTransition

"""

def decide_progress(
    db: Session,
    *,
    progress_id: uuid.UUID,
    approve: bool,
    notes: str | None,
    actor_id: uuid.UUID,
    now: datetime | None = None,
) -> UserStepProgress:
    row = db.get(UserStepProgress, progress_id)
    if not row:
        raise DanglingReference("Progress not found")

    before = row.status
    now = now or utcnow()
    target = ProgressStatus.COMPLETED if approve else ProgressStatus.REJECTED

    result = db.execute(
        update(UserStepProgress)
        .where(UserStepProgress.id == progress_id)
        .where(UserStepProgress.status.in_(DECIDABLE_STATUSES))
        .values(
            status=target,
            admin_notes=notes,
            completed_at=now if approve else None,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )

    db.refresh(row)

    if result.rowcount != 1:
        logger.warning(
            "decision refused: %s -> %s", row.status.value, target.value,
            extra={"progress_id": progress_id, "status": row.status.value},
        )
        raise InvalidTransition(f"Progress already {row.status.value}")

    write_admin_log(
        db,
        actor_id=actor_id,
        action=AdminAction.APPROVE_STEP if approve else AdminAction.REJECT_STEP,
        target_user_id=row.user_id,
        progress_id=row.id,
        before_value=before.value,
        after_value=target.value,
        notes=notes,
    )
    db.flush()

    logger.info(
        "progress decided: %s -> %s", before.value, target.value,
        extra={"progress_id": progress_id, "user_id": row.user_id, "status": target.value},
    )
    return row


def approve_progress(db: Session, *, progress_id: uuid.UUID, notes: str | None, actor_id: uuid.UUID,
                     now: datetime | None = None) -> UserStepProgress:
    return decide_progress(db, progress_id=progress_id, approve=True, notes=notes, actor_id=actor_id, now=now)


def reject_progress(db: Session, *, progress_id: uuid.UUID, notes: str | None, actor_id: uuid.UUID,
                    now: datetime | None = None) -> UserStepProgress:
    return decide_progress(db, progress_id=progress_id, approve=False, notes=notes, actor_id=actor_id, now=now)
