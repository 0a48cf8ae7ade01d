"""
services/accounts.py

로그인 계정(User) + 프로필(Profile) 생성 로직.

학생 회원가입(/auth/register), SUPER_ADMIN 의 관리자 계정 생성,
초기 SUPER_ADMIN 생성 스크립트가 모두 이 함수를 사용한다.
User 와 Profile 은 항상 함께 만들어진다. (Identity 당 Profile 1개)

"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import get_password_hash
from app.models.user import User, Profile, Role


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email))


def create_account(db: Session, *, email: str, password: str, full_name: str, role: Role = Role.USER) -> Profile:
    if get_user_by_email(db, email):
        raise ValueError("Email already registered")

    user = User(email=email, password_hash=get_password_hash(password))
    db.add(user)
    db.flush()

    profile = Profile(id=user.id, full_name=full_name, email=email, role=role)
    db.add(profile)
    db.flush()
    return profile
