"""

admin_log.py

관리자(Admin) 행위 기록(Audit Log) 모델 정의 파일.

관리자에 의해 수행된 주요 행위
(단계 승인, 단계 반려, 권한 변경, 계정 생성 등)를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

동시에 두 관리자가 같은 신청을 처리한 경우처럼
운영 중 발생할 수 있는 문제 추적과 감사(Audit) 목적의 모델이다.

설계 원칙:
- 실제 데이터 변경과 로그 기록을 분리
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- actor(행위자)와 target(대상 사용자)을 명확히 구분

"""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, value_enum
from app.models.user import utcnow



#  관리자 행위 유형 Enum

class AdminAction(str, Enum):
    APPROVE_STEP = "approve_step"
    REJECT_STEP = "reject_step"
    SET_ROLE = "set_role"
    CREATE_USER = "create_user"


"""
관리자 행위 로그 모델

- actor_id       : 행위를 수행한 관리자 ID
- target_user_id : 행위 대상 사용자 ID (없을 수 있음)
- progress_id    : 대상 단계 진행 레코드 ID (단계 승인/반려 시)
- action         : 수행된 관리자 행위 유형
- before_value   : 변경 전 값 (role 또는 status)
- after_value    : 변경 후 값 (role 또는 status)
- notes          : 관리자 메모
- created_at     : 행위 발생 시각 (UTC)

"""

class AdminActionLog(Base):
    __tablename__ = "admin_action_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    progress_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_step_progress.id", ondelete="SET NULL"), nullable=True
    )

    action: Mapped[AdminAction] = mapped_column(value_enum(AdminAction, "admin_action"), nullable=False)

    before_value: Mapped[str | None] = mapped_column(String(20), nullable=True)
    after_value: Mapped[str | None] = mapped_column(String(20), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
