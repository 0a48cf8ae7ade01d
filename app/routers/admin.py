import uuid
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_admin_area
from app.core.errors import DanglingReference, InvalidTransition
from app.models.step import ProgressStatus, UserStepProgress
from app.models.user import Profile
from app.schemas.step import DecisionRequest, ProgressSummaryResponse
from app.services.admin import admin_overview, list_reviews, get_review, students_with_progress
from app.services.workflow import approve_progress, reject_progress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_area)])


def _review_item(p: UserStepProgress) -> dict:
    return {
        "id": str(p.id),
        "status": p.status.value,
        "created_at": p.created_at.isoformat(),
        "updated_at": p.updated_at.isoformat(),
        "completed_at": p.completed_at.isoformat() if p.completed_at else None,
        "admin_notes": p.admin_notes,
        "student": {
            "id": str(p.profile.id),
            "full_name": p.profile.full_name,
            "email": p.profile.email,
        },
        "step": {
            "id": str(p.step.id),
            "name": p.step.name,
            "description": p.step.description,
            "step_type": p.step.step_type.value,
        },
    }


# 관리자 대시보드 통계 조회 엔드포인트
@router.get("")
def overview(db: Session = Depends(get_db)):
    stats = admin_overview(db)
    return {
        "data": {
            "pending_reviews": [_review_item(p) for p in stats["pending_reviews"]],
            "completed_reviews": [_review_item(p) for p in stats["completed_reviews"]],
            "recent_submissions": [_review_item(p) for p in stats["recent_submissions"]],
            "active_students": stats["active_students"],
            "total_students": stats["total_students"],
        }
    }


# 리뷰 목록 조회 엔드포인트 (status 미지정 시 pending + in_progress)
@router.get("/reviews")
def reviews(
    status: Literal["pending", "in_progress", "completed", "rejected"] | None = Query(default=None),
    limit: int = 100,
    db: Session = Depends(get_db),
):
    limit = max(1, min(limit, 200))
    statuses = (
        [ProgressStatus(status)]
        if status
        else [ProgressStatus.PENDING, ProgressStatus.IN_PROGRESS]
    )
    rows = list_reviews(db, statuses=statuses, limit=limit)
    return {
        "data": [_review_item(p) for p in rows],
        "meta": {
            "limit": limit,
            "count": len(rows),
        },
    }


# 리뷰 상세 조회 엔드포인트 (제출 데이터 포함)
@router.get("/reviews/{progress_id}")
def review_detail(progress_id: uuid.UUID, db: Session = Depends(get_db)):
    p = get_review(db, progress_id)
    if not p:
        raise HTTPException(status_code=404, detail="Review not found")

    item = _review_item(p)
    item["data"] = p.data
    return {"data": item}


def _decide(db: Session, *, progress_id: uuid.UUID, approve: bool, notes: str | None, actor: Profile):
    try:
        if approve:
            row = approve_progress(db, progress_id=progress_id, notes=notes, actor_id=actor.id)
        else:
            row = reject_progress(db, progress_id=progress_id, notes=notes, actor_id=actor.id)
        db.commit()
    except DanglingReference as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransition as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        db.rollback()
        logger.exception("review decision failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return _review_item(get_review(db, row.id))


# 단계 승인 엔드포인트
@router.post("/reviews/{progress_id}/approve")
def approve(
    progress_id: uuid.UUID,
    data: DecisionRequest,
    db: Session = Depends(get_db),
    current_admin: Profile = Depends(require_admin_area),
):
    item = _decide(db, progress_id=progress_id, approve=True, notes=data.notes, actor=current_admin)
    return {"message": "Step approved", "data": item}


# 단계 반려 엔드포인트
@router.post("/reviews/{progress_id}/reject")
def reject(
    progress_id: uuid.UUID,
    data: DecisionRequest,
    db: Session = Depends(get_db),
    current_admin: Profile = Depends(require_admin_area),
):
    item = _decide(db, progress_id=progress_id, approve=False, notes=data.notes, actor=current_admin)
    return {"message": "Step rejected", "data": item}


# 학생 목록 + 등록 프로그램 + 진행률 조회 엔드포인트
@router.get("/students")
def students(db: Session = Depends(get_db)):
    rows = students_with_progress(db)
    return {
        "data": [
            {
                "id": str(r["profile"].id),
                "full_name": r["profile"].full_name,
                "email": r["profile"].email,
                "created_at": r["profile"].created_at.isoformat(),
                "programs": r["programs"],
                "progress": ProgressSummaryResponse.from_summary(r["summary"]),
            }
            for r in rows
        ],
        "meta": {"count": len(rows)},
    }
