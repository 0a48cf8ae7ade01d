"""
services/progress.py

학생별 전체 진행률(Progress Aggregation) 계산.

- completed_count : 활성 단계 중 completed 인 진행 레코드 수
- total_count     : 활성 단계 수
- percentage      : completed_count / total_count * 100 (활성 단계가 없으면 0)
- current_step    : order_index 가 가장 낮으면서 아직 completed 가 아닌 활성 단계

summarize_progress 는 DB에 접근하지 않는 순수 함수이고,
진행 상황은 자주 바뀌므로 조회할 때마다 다시 계산한다. (캐시 없음)

관련 파일:
- app.models.step          : Step / UserStepProgress
- app.routers.dashboard    : 학생 대시보드
- app.services.admin       : 관리자 학생 목록 요약

"""

import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.step import Step, UserStepProgress, ProgressStatus


@dataclass(frozen=True)
class ProgressSummary:
    completed_count: int
    total_count: int
    percentage: float
    current_step: Step | None


def summarize_progress(steps: Iterable[Step], progress_rows: Iterable[UserStepProgress]) -> ProgressSummary:
    ordered = sorted(steps, key=lambda s: s.order_index)
    active_ids = {s.id for s in ordered}

    # 비활성 단계에 남아 있는 completed 레코드는 집계에서 제외 (100% 초과 방지)
    completed_ids = {
        p.step_id for p in progress_rows
        if p.status == ProgressStatus.COMPLETED and p.step_id in active_ids
    }

    total = len(ordered)
    completed = len(completed_ids)
    percentage = (completed / total) * 100 if total > 0 else 0.0

    current = next((s for s in ordered if s.id not in completed_ids), None)

    return ProgressSummary(
        completed_count=completed,
        total_count=total,
        percentage=percentage,
        current_step=current,
    )


def load_active_steps(db: Session) -> list[Step]:
    return list(
        db.scalars(
            select(Step).where(Step.is_active.is_(True)).order_by(Step.order_index)
        ).all()
    )


def load_user_progress(db: Session, *, user_id: uuid.UUID) -> list[UserStepProgress]:
    return list(
        db.scalars(select(UserStepProgress).where(UserStepProgress.user_id == user_id)).all()
    )
