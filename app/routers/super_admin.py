"""
super_admin.py

최고 관리자(SUPER_ADMIN) 전용 API 모음.

route group: /super-admin  (허용 role: super_admin)

주요 기능:
- 전체 통계 (사용자 / 프로그램 / 단계 / 진행 레코드 수, 최근 가입자, 프로그램별 등록 수)
- 프로그램 카탈로그 생성 / 수정
- 단계(Step) 카탈로그 생성 / 수정 (활성 단계끼리 order_index 중복 불가)
- 사용자 목록, 관리자 계정 생성, role 변경
- 관리자 행위 로그 조회

설계 원칙:
- 본인 role 변경 금지 (Profile 소유자는 role 을 바꿀 수 없음)
- 마지막 SUPER_ADMIN 강등 금지
- role 변경 / 계정 생성은 AdminActionLog 에 기록

관련 파일:
- app.services.admin       : 통계 / SUPER_ADMIN 수 계산
- app.services.programs    : 프로그램 카탈로그
- app.services.steps       : 단계 카탈로그
- app.services.accounts    : 계정 생성
- app.services.admin_log   : 감사 로그

"""

import uuid
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_super_admin
from app.core.errors import DanglingReference
from app.models.admin_log import AdminAction
from app.models.program import Program
from app.models.user import Profile, Role
from app.schemas.program import ProgramCreateRequest, ProgramUpdateRequest, ProgramResponse
from app.schemas.step import StepCreateRequest, StepUpdateRequest, StepResponse
from app.schemas.user import CreateUserRequest, ProfileResponse, RoleUpdate
from app.services.accounts import create_account
from app.services.admin import count_super_admins, super_admin_overview
from app.services.admin_log import write_admin_log, recent_admin_logs
from app.services.programs import create_program, update_program
from app.services.steps import list_steps, create_step, update_step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/super-admin", tags=["super-admin"], dependencies=[Depends(require_super_admin)])


def _commit_or_raise(db: Session, what: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{what} conflicts with existing data")
    except Exception as e:
        db.rollback()
        logger.exception("%s failed", what)
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")


# 최고 관리자 대시보드 통계
@router.get("")
def overview(db: Session = Depends(get_db)):
    stats = super_admin_overview(db)
    return {
        "data": {
            "total_users": stats["total_users"],
            "total_programs": stats["total_programs"],
            "total_steps": stats["total_steps"],
            "total_progress": stats["total_progress"],
            "recent_users": [
                {
                    "full_name": u.full_name,
                    "role": u.role.value,
                    "created_at": u.created_at.isoformat(),
                }
                for u in stats["recent_users"]
            ],
            "program_stats": stats["program_stats"],
        }
    }


"""
프로그램 카탈로그

- 목록은 비활성 프로그램 포함, 최신 생성순
- 등록 인원(enrolled_count)을 함께 반환

"""

@router.get("/programs")
def programs(db: Session = Depends(get_db)):
    rows = db.scalars(select(Program).order_by(desc(Program.created_at))).all()
    return {
        "data": [
            {
                **ProgramResponse.model_validate(p).model_dump(mode="json"),
                "enrolled_count": len(p.enrollments),
            }
            for p in rows
        ]
    }


@router.post("/programs")
def add_program(data: ProgramCreateRequest, db: Session = Depends(get_db)):
    try:
        program = create_program(db, name=data.name, description=data.description, is_active=data.is_active)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Program conflicts with existing data")
    except Exception as e:
        db.rollback()
        logger.exception("program create failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    _commit_or_raise(db, "Program")
    db.refresh(program)
    return {"message": "Program created", "data": ProgramResponse.model_validate(program)}


@router.patch("/programs/{program_id}")
def edit_program(program_id: uuid.UUID, data: ProgramUpdateRequest, db: Session = Depends(get_db)):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")

    try:
        program = update_program(db, program_id=program_id, changes=changes)
    except DanglingReference as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Program conflicts with existing data")
    except Exception as e:
        db.rollback()
        logger.exception("program update failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    _commit_or_raise(db, "Program")
    db.refresh(program)
    return {"message": "Program updated", "data": ProgramResponse.model_validate(program)}


"""
단계(Step) 카탈로그

- order_index 순 (비활성 포함)
- 활성 단계끼리 order_index 중복 시 400

"""

@router.get("/steps")
def steps(db: Session = Depends(get_db)):
    return {"data": [StepResponse.model_validate(s) for s in list_steps(db)]}


@router.post("/steps")
def add_step(data: StepCreateRequest, db: Session = Depends(get_db)):
    try:
        step = create_step(db, data=data.model_dump())
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Step conflicts with existing data")
    except Exception as e:
        db.rollback()
        logger.exception("step create failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    _commit_or_raise(db, "Step")
    db.refresh(step)
    return {"message": "Step created", "data": StepResponse.model_validate(step)}


@router.patch("/steps/{step_id}")
def edit_step(step_id: uuid.UUID, data: StepUpdateRequest, db: Session = Depends(get_db)):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")

    try:
        step = update_step(db, step_id=step_id, changes=changes)
    except DanglingReference as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Step conflicts with existing data")
    except Exception as e:
        db.rollback()
        logger.exception("step update failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    _commit_or_raise(db, "Step")
    db.refresh(step)
    return {"message": "Step updated", "data": StepResponse.model_validate(step)}


"""
사용자 관리

- 목록: 전체 프로필, 최신 가입순
- 생성: admin / super_admin 계정만 (학생은 직접 가입)
- role 변경: 본인 변경 금지, 마지막 SUPER_ADMIN 강등 금지

"""

@router.get("/users")
def users(db: Session = Depends(get_db)):
    rows = db.scalars(select(Profile).order_by(desc(Profile.created_at))).all()
    return {"data": [ProfileResponse.model_validate(p) for p in rows]}


@router.post("/users")
def add_user(
    data: CreateUserRequest,
    db: Session = Depends(get_db),
    current: Profile = Depends(require_super_admin),
):
    if data.role == Role.USER:
        raise HTTPException(status_code=400, detail="Students register themselves")

    try:
        profile = create_account(
            db,
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=data.role,
        )
        write_admin_log(
            db,
            actor_id=current.id,
            action=AdminAction.CREATE_USER,
            target_user_id=profile.id,
            after_value=profile.role.value,
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    _commit_or_raise(db, "User")
    db.refresh(profile)

    logger.info("staff account created", extra={"user_id": profile.id, "role": profile.role.value})
    return {"message": "User created", "data": ProfileResponse.model_validate(profile)}


@router.patch("/users/{user_id}/role")
def set_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current: Profile = Depends(require_super_admin),
):
    target = db.get(Profile, user_id)

    # 해당 사용자가 존재하지 않는 경우
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    # 자기 자신 권한 변경 금지
    if target.id == current.id:
        raise HTTPException(status_code=400, detail="Cannot change your own role")

    # 이미 해당 권한인 경우
    if target.role == data.role:
        raise HTTPException(status_code=400, detail=f"User already {target.role.value}")

    # 마지막 SUPER_ADMIN 강등 금지
    if target.role == Role.SUPER_ADMIN and count_super_admins(db) <= 1:
        raise HTTPException(status_code=400, detail="Cannot demote the last super_admin")

    before = target.role
    target.role = data.role
    write_admin_log(
        db,
        actor_id=current.id,
        action=AdminAction.SET_ROLE,
        target_user_id=target.id,
        before_value=before.value,
        after_value=target.role.value,
    )
    _commit_or_raise(db, "Role change")
    db.refresh(target)

    logger.info("role changed %s -> %s", before.value, target.role.value, extra={"user_id": target.id})
    return {
        "message": "Role updated",
        "data": ProfileResponse.model_validate(target),
    }


# 관리자 행위 로그 조회
@router.get("/logs")
def admin_logs(limit: int = 50, db: Session = Depends(get_db)):
    limit = max(1, min(limit, 200))

    result = []
    for log, actor, target in recent_admin_logs(db, limit=limit):
        result.append(
            {
                "id": str(log.id),
                "created_at": log.created_at.isoformat(),
                "action": log.action.value,
                "before": log.before_value,
                "after": log.after_value,
                "notes": log.notes,
                "progress_id": str(log.progress_id) if log.progress_id else None,
                "actor": {
                    "id": str(actor.id),
                    "full_name": actor.full_name,
                    "role": actor.role.value,
                },
                "target": (
                    {
                        "id": str(target.id),
                        "full_name": target.full_name,
                        "role": target.role.value,
                    }
                    if target
                    else None
                ),
            }
        )
    return {
        "data": result,
        "meta": {
            "limit": limit,
            "count": len(result),
        },
    }
