"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- 로깅 설정
- FastAPI 앱 인스턴스 생성
- CORS 미들웨어 설정
- 접근 제어 실패(AccessDenied) → redirect 응답 변환
- 각 route group 라우터(auth, dashboard, admin, super-admin) 등록
- 헬스 체크 / DB 연결 확인 / unauthorized 안내 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임
- 권한 실패는 화면 내 에러가 아니라 항상 redirect(303)로 응답

관련 파일:
- app.core.config        : 환경 변수 및 설정 로드
- app.core.access        : 접근 제어 게이트
- app.routers.*          : 기능별 API 라우터

"""

from fastapi import FastAPI, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.core.config import settings
from app.core.deps import get_db
from app.core.errors import AccessDenied
from app.core.logging_config import configure_logging
from app.routers import auth, dashboard, admin, super_admin

configure_logging()

app = FastAPI(title="Student Exchange Approval")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(admin.router)
app.include_router(super_admin.router)


"""
접근 제어 실패 처리

- Unauthenticated / ProfileMissing → /auth/login
- Forbidden                       → /unauthorized
- 303 See Other + Location 헤더, 바디에도 redirect_to 포함

"""
@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    return JSONResponse(
        status_code=status.HTTP_303_SEE_OTHER,
        headers={"Location": exc.redirect_to},
        content={"detail": exc.reason, "redirect_to": exc.redirect_to},
    )


"""
권한 없음 안내 엔드포인트

- Forbidden 시 redirect 되는 고정 목적지

"""
@app.get("/unauthorized")
def unauthorized():
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": "You do not have permission to access this page", "home": "/"},
    )


"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인

"""
@app.get("/health")
def health():
    return {"status": "ok"}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
