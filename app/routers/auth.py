"""
auth.py

인증(Authentication) API 모음.

회원 가입, 로그인, 토큰 재발급, 로그아웃(sign out)과 같이
사용자 인증 흐름 전반을 담당한다.
JWT 기반 인증 방식을 사용하며, Access Token + Refresh Token 구조를 따른다.

주요 기능:
- 학생 회원 가입 (User + Profile(role=user) 동시 생성)
- 로그인 및 토큰 발급
- Refresh Token 기반 Access Token 재발급
- 로그아웃 (Refresh Token 무효화)
- 현재 로그인 정보 조회

설계 원칙:
- Access Token은 Authorization Header로 전달
- Refresh Token은 HttpOnly Cookie로 관리
- Refresh Token Version을 이용해 로그아웃 / 토큰 무효화 처리
- /auth/login (GET) 은 접근 제어 게이트의 redirect 목적지

관련 파일:
- app.core.security        : 비밀번호 해시 / JWT 생성·검증
- app.core.deps            : 현재 사용자 의존성(get_current_user)
- app.services.accounts    : 계정 + 프로필 생성
- app.schemas.auth         : 인증 관련 요청/응답

"""

import logging

from jose import JWTError
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_user
from app.core.config import settings
from app.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)

from app.models.user import User, Role
from app.schemas.auth import RegisterRequest, LoginRequest
from app.services.accounts import create_account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE_NAME = "refresh_token"


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,        # 로컬 False / HTTPS 운영 True
        samesite=settings.COOKIE_SAMESITE,    # "lax" 추천
        domain=settings.COOKIE_DOMAIN,        # 보통 None
        path="/",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)


"""
회원 가입 API

- 이메일 기준으로 신규 학생 가입
- Profile 은 항상 role=user 로 생성 (관리자 계정은 SUPER_ADMIN 이 생성)

"""

@router.post("/register")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        profile = create_account(
            db,
            email=data.email,
            password=data.password,
            full_name=data.full_name,
            role=Role.USER,
        )
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    except Exception as e:
        db.rollback()
        logger.exception("register failed")
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    logger.info("student registered", extra={"user_id": profile.id})
    return {
        "data": {
            "id": str(profile.id),
            "email": profile.email,
        }
    }


"""
로그인 진입점

- 접근 제어 게이트가 미로그인 / 프로필 없음일 때 redirect 하는 위치
- 실제 로그인은 POST /auth/login

"""

@router.get("/login")
def login_entry():
    return {
        "detail": "Login required",
        "login": {"method": "POST", "path": "/auth/login", "fields": ["email", "password"]},
    }


"""
로그인 API

- 이메일 / 비밀번호 인증
- Access Token은 응답 바디로 반환
- Refresh Token은 HttpOnly Cookie로 설정

"""

@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):

    user = db.scalar(select(User).where(User.email == data.email))

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    access = create_access_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    refresh = create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    _set_refresh_cookie(response, refresh)

    return {
        "data": {
            "access_token": access,
            "token_type": "bearer",
        }
    }

"""
Access Token 재발급 API

- Refresh Token 쿠키를 사용해 새로운 Access Token 발급
- Refresh Token Version이 일치하지 않으면 재발급 거부
- 재발급 시 Refresh Token을 회전(rotation)

"""

@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")

    try:
        user_id, token_rtv = decode_refresh_token(token)
    except JWTError:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.get(User, user_id)
    if not user:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="User not found")

    if token_rtv != user.refresh_token_version:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    user.refresh_token_version += 1
    db.commit()
    db.refresh(user)

    new_access = create_access_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    new_refresh = create_refresh_token(
        subject=str(user.id),
        refresh_token_version=user.refresh_token_version,
    )
    _set_refresh_cookie(response, new_refresh)

    return {
        "data": {
            "access_token": new_access,
            "token_type": "bearer",
        }
    }

"""
로그아웃(sign out) API

- Refresh Token Version 증가로 기존 Refresh Token 무효화
- 클라이언트의 Refresh Token 쿠키 삭제

"""

@router.post("/logout")
def logout(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        user.refresh_token_version += 1
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    response = Response(status_code=204)
    _clear_refresh_cookie(response)
    return response


# 현재 로그인한 계정과 프로필(role) 조회
@router.get("/me")
def me(user: User = Depends(get_current_user)):
    profile = user.profile
    return {
        "data": {
            "id": str(user.id),
            "email": user.email,
            "profile": (
                {
                    "full_name": profile.full_name,
                    "role": profile.role.value,
                }
                if profile
                else None
            ),
        }
    }
