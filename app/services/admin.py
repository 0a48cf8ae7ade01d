"""
services/admin.py

관리자 / 최고 관리자 화면에서 사용하는 조회·집계 로직 모음.

라우터에서는 이 파일의 함수를 호출하여
DB 조회와 집계를 수행하고, 응답 형태만 만든다.

주요 기능:
- 현재 SUPER_ADMIN 계정 수 계산 (마지막 SUPER_ADMIN 보호)
- 관리자 대시보드 통계 (대기 중 리뷰, 최근 제출, 학생 수)
- 학생 목록 + 등록 프로그램 + 진행률 요약
- 최고 관리자 대시보드 통계 (전체 건수, 최근 가입자, 프로그램별 등록 수)

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어는 라우터에서 수행
- 진행률 계산은 app.services.progress 에 위임

관련 파일:
- app.routers.admin        : 관리자 API
- app.routers.super_admin  : 최고 관리자 API

"""

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, desc

from app.models.user import Profile, Role
from app.models.program import Program, UserProgram
from app.models.step import Step, UserStepProgress, ProgressStatus
from app.services.progress import load_active_steps, summarize_progress


"""
현재 SUPER_ADMIN 계정 수를 반환

- 마지막 SUPER_ADMIN 강등 방지에 사용

"""

def count_super_admins(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(Profile).where(Profile.role == Role.SUPER_ADMIN)
    ) or 0


def _progress_query():
    return select(UserStepProgress).options(
        selectinload(UserStepProgress.profile),
        selectinload(UserStepProgress.step),
    )


def list_reviews(db: Session, *, statuses: list[ProgressStatus], limit: int | None = None) -> list[UserStepProgress]:
    stmt = (
        _progress_query()
        .where(UserStepProgress.status.in_(statuses))
        .order_by(desc(UserStepProgress.updated_at), desc(UserStepProgress.created_at))
    )
    if limit:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt).all())


def get_review(db: Session, progress_id) -> UserStepProgress | None:
    return db.scalar(_progress_query().where(UserStepProgress.id == progress_id))


"""
관리자 대시보드 통계

- pending_reviews   : pending / in_progress 최신 10건
- completed_reviews : 최근 완료 5건
- recent_submissions: 최근 생성된 진행 레코드 5건
- active_students   : 미완료 단계가 있는 학생 수
- total_students    : role=user 프로필 수

"""

def admin_overview(db: Session) -> dict:
    pending = db.scalars(
        _progress_query()
        .where(UserStepProgress.status.in_([ProgressStatus.PENDING, ProgressStatus.IN_PROGRESS]))
        .order_by(desc(UserStepProgress.created_at))
        .limit(10)
    ).all()

    completed = db.scalars(
        _progress_query()
        .where(UserStepProgress.status == ProgressStatus.COMPLETED)
        .order_by(desc(UserStepProgress.updated_at))
        .limit(5)
    ).all()

    recent = db.scalars(
        _progress_query().order_by(desc(UserStepProgress.created_at)).limit(5)
    ).all()

    active_students = db.scalar(
        select(func.count(func.distinct(UserStepProgress.user_id)))
        .where(UserStepProgress.status != ProgressStatus.COMPLETED)
    ) or 0

    total_students = db.scalar(
        select(func.count()).select_from(Profile).where(Profile.role == Role.USER)
    ) or 0

    return {
        "pending_reviews": list(pending),
        "completed_reviews": list(completed),
        "recent_submissions": list(recent),
        "active_students": active_students,
        "total_students": total_students,
    }


"""
학생 목록 (관리자용)

- role=user 프로필만, 가입 최신순
- 등록 프로그램 이름 목록과 진행률 요약을 함께 반환

"""

def students_with_progress(db: Session) -> list[dict]:
    students = db.scalars(
        select(Profile).where(Profile.role == Role.USER).order_by(desc(Profile.created_at))
    ).all()
    if not students:
        return []

    ids = [s.id for s in students]
    steps = load_active_steps(db)

    progress_by_user: dict = {}
    for p in db.scalars(select(UserStepProgress).where(UserStepProgress.user_id.in_(ids))).all():
        progress_by_user.setdefault(p.user_id, []).append(p)

    programs_by_user: dict = {}
    rows = db.execute(
        select(UserProgram.user_id, Program.name)
        .join(Program, Program.id == UserProgram.program_id)
        .where(UserProgram.user_id.in_(ids))
        .order_by(Program.name)
    ).all()
    for user_id, name in rows:
        programs_by_user.setdefault(user_id, []).append(name)

    result = []
    for s in students:
        result.append(
            {
                "profile": s,
                "programs": programs_by_user.get(s.id, []),
                "summary": summarize_progress(steps, progress_by_user.get(s.id, [])),
            }
        )
    return result


"""
최고 관리자 대시보드 통계

- 전체 사용자 / 프로그램 / 단계 / 진행 레코드 수
- 최근 가입 사용자 5명
- 프로그램별 등록 인원

"""

def super_admin_overview(db: Session) -> dict:
    def _count(model) -> int:
        return db.scalar(select(func.count()).select_from(model)) or 0

    recent_users = db.scalars(select(Profile).order_by(desc(Profile.created_at)).limit(5)).all()

    program_stats = db.execute(
        select(Program.name, func.count(UserProgram.id))
        .join(UserProgram, UserProgram.program_id == Program.id)
        .group_by(Program.id, Program.name)
        .order_by(desc(func.count(UserProgram.id)), Program.name)
    ).all()

    return {
        "total_users": _count(Profile),
        "total_programs": _count(Program),
        "total_steps": _count(Step),
        "total_progress": _count(UserStepProgress),
        "recent_users": list(recent_users),
        "program_stats": [{"name": name, "count": count} for name, count in program_stats],
    }
