"""
user.py

로그인 계정(User)과 권한 프로필(Profile) 모델 정의 파일.

- User    : 인증 주체(Identity). 이메일 / 비밀번호 해시 / 토큰 버전만 보관
- Profile : User와 1:1. 이름과 role을 가지며, role이 유일한 권한 판단 기준

접근 제어 게이트(app.core.access)는 User.id로 Profile을 조회해
route group 허용 여부를 판단한다.

"""

import uuid
import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, value_enum


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


"""
사용자 권한(Role) 정의

- USER         : 학생 (교환학생 신청자)
- ADMIN        : 학과 관리자 (Admin Prodi)
- SUPER_ADMIN  : 최고 관리자

DB에는 "user" / "admin" / "super_admin" 값 그대로 저장된다.

"""

class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


"""
로그인 계정(User) 모델

- email 은 고유 식별자
- refresh_token_version 으로 로그아웃 및 토큰 무효화 지원

"""

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    profile: Mapped[Optional["Profile"]] = relationship(back_populates="user", uselist=False)


"""
프로필(Profile) 모델

- id 는 users.id 와 동일 (1:1)
- role 은 본인이 변경할 수 없고 SUPER_ADMIN 만 변경 가능
- email 은 목록 화면용으로 복사해 둔 값

"""

class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[Role] = mapped_column(value_enum(Role, "role"), nullable=False, default=Role.USER, index=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user: Mapped[User] = relationship(back_populates="profile")
