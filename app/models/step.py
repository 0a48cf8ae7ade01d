"""
step.py

신청 단계(Step) 카탈로그와 학생별 단계 진행(UserStepProgress) 모델.

- Step             : 전역 단계 정의. order_index 로 순서가 정해지는 선형 워크플로
- UserStepProgress : (학생, 단계) 쌍마다 최대 1개. 행이 없으면 '시작 전(not_started)'

상태 전이 규칙은 모델이 아니라 app.services.workflow 에서 관리한다.

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, value_enum
from app.models.user import Profile, utcnow


class StepType(str, Enum):
    FORM = "form"
    UPLOAD = "upload"
    REVIEW = "review"
    APPROVAL = "approval"


# 행이 없는 상태(not_started)는 DB 값이 아니므로 여기 포함하지 않는다
class ProgressStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class Step(Base):
    """워크플로 단계 정의.

    form_fields: {"fields": [{"name", "type", "required", "options", "placeholder"}]}
    """

    __tablename__ = "steps"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    step_type: Mapped[StepType] = mapped_column(value_enum(StepType, "step_type"), nullable=False)

    order_index: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    form_fields: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class UserStepProgress(Base):
    """학생별 단계 진행 레코드.

    - (user_id, step_id) 는 유일
    - completed_at 은 status == completed 일 때만 값이 있다
    """

    __tablename__ = "user_step_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "step_id", name="uq_user_step_progress_user_step"),
        Index("ix_user_step_progress_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    step_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("steps.id", ondelete="CASCADE"), nullable=False, index=True)

    status: Mapped[ProgressStatus] = mapped_column(value_enum(ProgressStatus, "progress_status"), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    step: Mapped[Step] = relationship()
    profile: Mapped[Profile] = relationship()
