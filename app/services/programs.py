"""
services/programs.py

프로그램 카탈로그와 학생 등록(Enrollment) 로직.

- 학생은 활성 프로그램에만 스스로 등록할 수 있다.
- 같은 프로그램에 다시 등록 요청하면 기존 등록을 그대로 돌려준다. (멱등)
- 프로그램 생성/수정은 SUPER_ADMIN 라우터에서만 호출한다.

"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.core.errors import DanglingReference
from app.models.program import Program, UserProgram
from app.models.user import Profile

logger = logging.getLogger(__name__)


def list_active_programs(db: Session) -> list[Program]:
    return list(
        db.scalars(select(Program).where(Program.is_active.is_(True)).order_by(Program.name)).all()
    )


def enrolled_program_ids(db: Session, *, user_id: uuid.UUID) -> set[uuid.UUID]:
    return set(db.scalars(select(UserProgram.program_id).where(UserProgram.user_id == user_id)).all())


def list_enrollments(db: Session, *, user_id: uuid.UUID) -> list[UserProgram]:
    return list(
        db.scalars(
            select(UserProgram)
            .options(selectinload(UserProgram.program))
            .where(UserProgram.user_id == user_id)
            .order_by(UserProgram.created_at)
        ).all()
    )


def enroll(db: Session, *, user_id: uuid.UUID, program_id: uuid.UUID) -> UserProgram:
    program = db.get(Program, program_id)
    if not program or not program.is_active:
        raise DanglingReference("Program not found")

    if not db.get(Profile, user_id):
        raise DanglingReference("User not found")

    existing = db.scalar(
        select(UserProgram)
        .where(UserProgram.user_id == user_id)
        .where(UserProgram.program_id == program_id)
    )
    if existing:
        return existing

    enrollment = UserProgram(user_id=user_id, program_id=program_id)
    db.add(enrollment)
    db.flush()

    logger.info("user enrolled in program %s", program.name, extra={"user_id": user_id})
    return enrollment


def create_program(db: Session, *, name: str, description: str | None, is_active: bool) -> Program:
    program = Program(name=name, description=description, is_active=is_active)
    db.add(program)
    db.flush()
    return program


def update_program(db: Session, *, program_id: uuid.UUID, changes: dict) -> Program:
    program = db.get(Program, program_id)
    if not program:
        raise DanglingReference("Program not found")

    for key, value in changes.items():
        setattr(program, key, value)
    db.flush()
    return program
