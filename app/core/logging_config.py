"""
logging_config.py

애플리케이션 로그 설정 파일.

- 개발 환경: 사람이 읽기 쉬운 한 줄 포맷
- 운영 환경: JSON 포맷 (로그 수집기 호환)
- 로그 레벨: LOG_LEVEL 환경 변수로 제어

각 모듈은 logging.getLogger(__name__) 으로 로거를 얻고,
핸들러/포맷 구성은 앱 시작 시 configure_logging() 한 번으로 끝낸다.

관련 파일:
- app.core.config        : LOG_LEVEL / LOG_JSON
- app.main               : 앱 생성 시 configure_logging 호출

"""

import json
import logging
import sys
from datetime import datetime, timezone

from app.core.config import settings


# 요청/도메인 컨텍스트로 extra= 에 실어 보내는 필드
_EXTRA_FIELDS = (
    "user_id",
    "step_id",
    "progress_id",
    "route_group",
    "role",
    "status",
    "redirect_to",
)


class JSONFormatter(logging.Formatter):
    """운영 환경용 JSON 포맷터."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = str(val)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """개발 환경용 포맷터."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        base = f"{ts} {record.levelname:<8} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if settings.LOG_JSON else ReadableFormatter())

    root = logging.getLogger("app")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False

    # SQLAlchemy 엔진 로그는 WARNING 이상만
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
