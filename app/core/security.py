"""
security.py

비밀번호 해싱 및 JWT 토큰 생성/검증 유틸리티.

인증 라우터(app.routers.auth)와 계정 생성 서비스(app.services.accounts)가
사용하는 저수준 보안 기능만 제공하며, 라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt)
- JWT Access / Refresh Token 생성
- Refresh Token 디코딩 및 검증

설계 원칙:
- Access Token과 Refresh Token을 서로 다른 시크릿으로 분리
- Access / Refresh Token 모두 version(rtv)을 넣어 로그아웃 시 서버에서 무효화
- 만료 시각(exp)은 UTC 기준

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : Access Token 으로 현재 사용자(Identity) 확인

"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Literal

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


# bcrypt 기반 비밀번호 해싱 컨텍스트
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


"""
JWT 토큰 생성 내부 공통 함수

- subject(sub): 사용자 식별자(user_id)
- token_type: access 또는 refresh
- extra: rtv(version) 등 추가 정보

"""

def _create_token(*, subject: str, token_type: Literal["access", "refresh"],
                  expires_delta: timedelta, secret: str, extra: Optional[dict] = None) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": subject,
        "type": token_type,
        "exp": int(expire.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


# Access Token 에도 rtv 를 넣어 로그아웃 시 즉시 무효화
def create_access_token(subject: str, refresh_token_version: int, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject=subject,
        token_type="access",
        expires_delta=expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        secret=settings.SECRET_KEY,
        extra={"rtv": refresh_token_version},
    )


def create_refresh_token(subject: str, refresh_token_version: int, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject=subject,
        token_type="refresh",
        expires_delta=expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        secret=settings.REFRESH_SECRET_KEY,
        extra={"rtv": refresh_token_version},
    )


"""
Refresh Token 디코딩 및 검증

- 토큰 타입(refresh) 확인
- user_id(UUID)와 rtv(version) 반환
- 유효하지 않으면 JWTError 발생

"""

def decode_refresh_token(token: str) -> tuple[uuid.UUID, int]:
    payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "refresh":
        raise JWTError("Not a refresh token")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise JWTError("Invalid subject")

    return user_id, int(payload.get("rtv", -1))
