from typing import Generator
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from app.core.access import check_access, DASHBOARD, ADMIN, SUPER_ADMIN
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.user import User, Profile

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _claims_from_token(token: str) -> tuple[uuid.UUID, int] | None:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None

    # access 토큰만 허용 (refresh 토큰 차단)
    if payload.get("type") != "access":
        return None

    try:
        return uuid.UUID(payload.get("sub") or ""), int(payload.get("rtv", -1))
    except (TypeError, ValueError):
        return None


# 토큰이 없거나 잘못되었으면 예외 대신 None (게이트가 Unauthenticated 로 처리)
def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    if cred is None:
        return None

    claims = _claims_from_token(cred.credentials)
    if claims is None:
        return None

    user_id, token_rtv = claims
    user = db.get(User, user_id)

    # 로그아웃 / 토큰 재발급으로 버전이 바뀌면 이전 토큰은 로그인 정보 없음으로 취급
    if user is None or user.refresh_token_version != token_rtv:
        return None
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def route_gate(route_group: str):
    def _gate(
        identity: User | None = Depends(get_optional_user),
        db: Session = Depends(get_db),
    ) -> Profile:
        return check_access(db, identity, route_group)
    return _gate

# 라우터 단위 dependencies 와 핸들러 인자에 같은 객체를 써야 요청당 한 번만 평가된다
require_dashboard = route_gate(DASHBOARD)
require_admin_area = route_gate(ADMIN)
require_super_admin = route_gate(SUPER_ADMIN)
