"""
services/steps.py

단계(Step) 카탈로그 관리 로직.

단계는 전역 공통이며 order_index 순서로 하나의 선형 워크플로를 이룬다.

규칙:
- 활성 단계끼리는 order_index 가 겹칠 수 없다.
- 비활성 단계는 순서 충돌 검사에서 제외된다.
- form_fields 는 {"fields": [...]} 형태로 저장한다.

"""

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import DanglingReference
from app.models.step import Step


# 비활성 단계 포함, 순서대로 (관리 화면용)
def list_steps(db: Session) -> list[Step]:
    return list(db.scalars(select(Step).order_by(Step.order_index, Step.created_at)).all())


def _ensure_order_free(db: Session, *, order_index: int, exclude_id: uuid.UUID | None = None) -> None:
    stmt = select(Step).where(Step.is_active.is_(True), Step.order_index == order_index)
    if exclude_id is not None:
        stmt = stmt.where(Step.id != exclude_id)

    if db.scalar(stmt):
        raise ValueError("order_index already used by an active step")


def create_step(db: Session, *, data: dict) -> Step:
    if data.get("is_active", True):
        _ensure_order_free(db, order_index=data["order_index"])

    step = Step(**data)
    db.add(step)
    db.flush()
    return step


def update_step(db: Session, *, step_id: uuid.UUID, changes: dict) -> Step:
    step = db.get(Step, step_id)
    if not step:
        raise DanglingReference("Step not found")

    order_index = changes.get("order_index", step.order_index)
    is_active = changes.get("is_active", step.is_active)
    if is_active:
        _ensure_order_free(db, order_index=order_index, exclude_id=step.id)

    for key, value in changes.items():
        setattr(step, key, value)
    db.flush()
    return step
