"""
dashboard.py

학생(Student) 대시보드 API 모음.

route group: /dashboard  (허용 role: user, super_admin)

주요 기능:
- 대시보드: 프로필, 등록 프로그램, 전체 단계 현황, 진행률, 현재 단계
- 본인 프로필 조회
- 프로그램 목록 조회 및 등록
- 단계 상세 조회 (편집 가능 여부 포함)
- 단계 제출

설계 원칙:
- 접근 제어는 라우터 단위 게이트(require_dashboard)에서 한 번만 수행
- 모든 데이터는 "본인 기준"으로만 조회/변경
- 상태 전이 규칙은 app.services.workflow 에 위임
- 실패한 제출은 롤백 후 에러 메시지(detail)로 응답, 자동 재시도 없음

관련 파일:
- app.core.deps            : require_dashboard 게이트
- app.services.workflow    : 단계 제출 상태 머신
- app.services.progress    : 진행률 계산
- app.services.programs    : 프로그램 등록

"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_dashboard
from app.core.errors import DanglingReference, InvalidTransition, SubmissionInvalid
from app.models.step import Step
from app.models.user import Profile
from app.schemas.program import ProgramResponse, StudentProgramResponse
from app.schemas.step import StepResponse, ProgressResponse, ProgressSummaryResponse, SubmitRequest
from app.schemas.user import ProfileResponse
from app.services.programs import list_active_programs, list_enrollments, enrolled_program_ids, enroll
from app.services.progress import load_active_steps, load_user_progress, summarize_progress
from app.services.workflow import get_progress, progress_state, is_editable, submit_step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(require_dashboard)])


"""
학생 대시보드 API

- 활성 단계 전체와 단계별 상태(not_started 포함), 관리자 메모
- 전체 진행률과 현재 단계
- 등록한 프로그램 목록

"""
@router.get("")
def dashboard(
    db: Session = Depends(get_db),
    profile: Profile = Depends(require_dashboard),
):
    steps = load_active_steps(db)
    progress = load_user_progress(db, user_id=profile.id)
    summary = summarize_progress(steps, progress)

    by_step = {p.step_id: p for p in progress}
    step_rows = []
    for step in steps:
        row = by_step.get(step.id)
        step_rows.append(
            {
                "step": StepResponse.model_validate(step),
                "status": progress_state(row).status,
                "progress_id": str(row.id) if row else None,
                "admin_notes": row.admin_notes if row else None,
            }
        )

    enrollments = list_enrollments(db, user_id=profile.id)

    return {
        "data": {
            "profile": ProfileResponse.model_validate(profile),
            "progress": ProgressSummaryResponse.from_summary(summary),
            "steps": step_rows,
            "enrollments": [ProgramResponse.model_validate(e.program) for e in enrollments],
        }
    }


@router.get("/profile")
def my_profile(profile: Profile = Depends(require_dashboard)):
    return {"data": ProfileResponse.model_validate(profile)}


# 활성 프로그램 목록 (이름순) + 본인 등록 여부
@router.get("/programs")
def programs(
    db: Session = Depends(get_db),
    profile: Profile = Depends(require_dashboard),
):
    enrolled = enrolled_program_ids(db, user_id=profile.id)
    return {
        "data": [
            StudentProgramResponse(
                **ProgramResponse.model_validate(p).model_dump(),
                enrolled=p.id in enrolled,
            )
            for p in list_active_programs(db)
        ]
    }


@router.post("/programs/{program_id}/enroll")
def enroll_program(
    program_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: Profile = Depends(require_dashboard),
):
    try:
        enrollment = enroll(db, user_id=profile.id, program_id=program_id)
        db.commit()
    except DanglingReference as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Enrollment changed concurrently, try again")
    except Exception as e:
        db.rollback()
        logger.exception("enroll failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return {
        "message": "Enrolled",
        "data": {
            "id": str(enrollment.id),
            "program_id": str(enrollment.program_id),
        },
    }


"""
단계 상세 조회 API

- 비활성 / 존재하지 않는 단계는 404
- editable: 지금 학생이 제출할 수 있는지 (completed / pending 이면 False)

"""
@router.get("/steps/{step_id}")
def step_detail(
    step_id: uuid.UUID,
    db: Session = Depends(get_db),
    profile: Profile = Depends(require_dashboard),
):
    step = db.get(Step, step_id)
    if not step or not step.is_active:
        raise HTTPException(status_code=404, detail="Step not found")

    row = get_progress(db, user_id=profile.id, step_id=step.id)
    state = progress_state(row)

    return {
        "data": {
            "step": StepResponse.model_validate(step),
            "status": state.status,
            "editable": is_editable(state),
            "progress": ProgressResponse.model_validate(row) if row else None,
        }
    }


"""
단계 제출 API

- form / upload → in_progress, review / approval → pending
- 정의되지 않은 필드, 필수값 누락, 잘못된 선택값 → 400
- 이미 완료 / 검토 대기 중 → 409
- 실패 시 아무 것도 저장하지 않음

"""
@router.post("/steps/{step_id}/submit")
def submit(
    step_id: uuid.UUID,
    data: SubmitRequest,
    db: Session = Depends(get_db),
    profile: Profile = Depends(require_dashboard),
):
    try:
        row = submit_step(db, user_id=profile.id, step_id=step_id, data=data.data)
        db.commit()
        db.refresh(row)
    except DanglingReference as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubmissionInvalid as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidTransition as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except IntegrityError:
        # 같은 단계를 동시에 처음 제출한 경우 (user_id, step_id) 유니크 충돌
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Step was submitted concurrently, try again")
    except Exception as e:
        db.rollback()
        logger.exception("step submission failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return {
        "message": "Step submitted",
        "data": ProgressResponse.model_validate(row),
    }
