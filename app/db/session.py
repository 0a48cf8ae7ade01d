"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

FastAPI 의존성(get_db)을 통해 요청 단위로 세션을 생성/종료한다.
요청 간 공유되는 가변 상태는 DB뿐이며, 세션은 요청마다 새로 만든다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 세션 생성/종료 책임을 명확히 분리
- pool_pre_ping=True로 유휴 연결 오류 방지
- SQLite(로컬/테스트)는 스레드 검사 옵션만 추가

관련 파일:
- app.core.config        : DATABASE_URL 설정
- app.core.deps          : get_db 의존성

"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def build_engine(url: str, **kwargs):
    # TestClient는 별도 스레드에서 요청을 처리하므로 SQLite 스레드 검사를 끈다
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DATABASE_URL)

# 요청 단위로 사용할 세션 팩토리
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)
