"""
access.py

접근 제어 게이트(Access Control Gate).

보호된 모든 요청은 route group 단위로 이 게이트를 통과해야 한다.

판단 순서:
1. 로그인 정보(Identity) 없음        → Unauthenticated → /auth/login
2. Identity 에 해당하는 Profile 없음 → ProfileMissing  → /auth/login
3. Profile.role 이 허용 목록에 없음  → Forbidden       → /unauthorized
4. 통과 → Profile 반환 (라우터에서 role 로 조건부 응답 가능)

설계 원칙:
- route group → 허용 role 표는 이 파일 한 곳에서만 관리
- 요청마다 다시 평가 (role 은 언제든 바뀔 수 있으므로 캐시하지 않음)
- 공유 가변 상태 없음, 요청 간 독립적으로 동시 실행 가능

관련 파일:
- app.core.deps           : FastAPI 의존성으로 게이트 연결
- app.core.errors         : AccessDenied 계열 예외
- app.main                : AccessDenied → redirect 응답 변환

"""

import logging
import uuid

from sqlalchemy.orm import Session

from app.core.errors import Unauthenticated, ProfileMissing, Forbidden
from app.models.user import User, Profile, Role

logger = logging.getLogger(__name__)

DASHBOARD = "/dashboard"
ADMIN = "/admin"
SUPER_ADMIN = "/super-admin"

# /admin 은 user 를 허용한다. admin role 이 아님에 주의 (DESIGN.md 참고)
ROUTE_GROUP_ROLES: dict[str, frozenset[Role]] = {
    DASHBOARD: frozenset({Role.USER, Role.SUPER_ADMIN}),
    ADMIN: frozenset({Role.USER}),
    SUPER_ADMIN: frozenset({Role.SUPER_ADMIN}),
}


def load_profile(db: Session, user_id: uuid.UUID) -> Profile | None:
    return db.get(Profile, user_id)


def evaluate_gate(identity: User | None, profile: Profile | None, route_group: str) -> Profile:
    if identity is None:
        logger.info("gate denied: no identity", extra={"route_group": route_group})
        raise Unauthenticated(route_group)

    if profile is None:
        logger.info("gate denied: profile missing", extra={"route_group": route_group, "user_id": identity.id})
        raise ProfileMissing(route_group)

    allowed = ROUTE_GROUP_ROLES[route_group]
    if profile.role not in allowed:
        logger.info(
            "gate denied: role %s not allowed", profile.role.value,
            extra={"route_group": route_group, "user_id": identity.id, "role": profile.role.value},
        )
        raise Forbidden(route_group)

    return profile


def check_access(db: Session, identity: User | None, route_group: str) -> Profile:
    profile = load_profile(db, identity.id) if identity is not None else None
    return evaluate_gate(identity, profile, route_group)
