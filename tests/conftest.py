import os
import tempfile

# app.core.config 의 필수 설정 (app import 전에 세팅, 이미 있으면 그대로 사용)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-access-secret")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.main import app as fastapi_app
from app.core.config import settings
from app.core.deps import get_db
from app.db.base import Base
from app.db.session import build_engine

# ✅ 모델 import (Base.metadata에 테이블 등록)
import app.models  # noqa: F401


# TEST_DATABASE_URL 이 없으면 임시 디렉터리의 SQLite 파일을 사용
TEST_DB_URL = settings.TEST_DATABASE_URL or os.getenv("TEST_DATABASE_URL")
if not TEST_DB_URL:
    TEST_DB_URL = f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'test.db')}"

engine = build_engine(TEST_DB_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """테스트 전체 시작/종료 때만 스키마 생성/삭제"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables():
    """각 테스트 시작 전에 데이터 초기화 (테이블은 유지, row만 삭제)"""
    # FK 의존성 역순으로 삭제
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture()
def db_session():
    """테스트에서 직접 DB 조작할 때 쓰는 세션"""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def client():
    fastapi_app.dependency_overrides[get_db] = override_get_db
    # 접근 제어 실패는 303 redirect 이므로 자동으로 따라가지 않는다
    with TestClient(fastapi_app, follow_redirects=False) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
