"""
base.py

SQLAlchemy ORM Base 정의 파일.

모든 모델(User, Profile, Program, Step, UserStepProgress 등)은
이 Base를 기준으로 테이블 메타데이터가 관리되며,
Alembic 마이그레이션 또한 이 Base를 기준으로 동작한다.

설계 원칙:
- Base 정의는 단일 파일에서만 관리
- 모델 간 순환 참조 방지
- 제약 조건 이름 규칙을 고정해 Alembic autogenerate 결과를 안정적으로 유지

관련 파일:
- app.models.*            : 모든 ORM 모델
- alembic/env.py          : 마이그레이션 메타데이터 로드

"""

from sqlalchemy import Enum as SAEnum, MetaData
from sqlalchemy.orm import declarative_base

# 제약 조건 이름 규칙 (uq_<table>_<col>, fk_<table>_<col>_<ref> ...)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# 모든 ORM 모델이 상속받는 Base 클래스
Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))


def value_enum(enum_cls, name: str) -> SAEnum:
    """Enum 컬럼 타입. 멤버 이름이 아닌 값("super_admin", "in_progress")으로 저장한다."""
    return SAEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
