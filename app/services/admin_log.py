"""
services/admin_log.py

관리자 행위 로그 기록 서비스.

관리자가 수행한 단계 승인/반려, 권한 변경, 계정 생성을
AdminActionLog 테이블에 기록한다.

로그 기록은 같은 트랜잭션 안에서 세션에 추가만 하며,
실제 데이터 변경이 롤백되면 로그도 함께 롤백된다.

설계 원칙:
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- db.commit()은 호출 측(라우터)에서 수행

"""

from sqlalchemy import select, desc
from sqlalchemy.orm import Session, aliased

from app.models.admin_log import AdminActionLog, AdminAction
from app.models.user import Profile


def write_admin_log(
    db: Session,
    *,
    actor_id,
    action: AdminAction,
    target_user_id=None,
    progress_id=None,
    before_value=None,
    after_value=None,
    notes=None,
) -> AdminActionLog:
    log = AdminActionLog(
        actor_id=actor_id,
        action=action,
        target_user_id=target_user_id,
        progress_id=progress_id,
        before_value=before_value,
        after_value=after_value,
        notes=notes,
    )
    db.add(log)
    return log


"""
최근 관리자 행위 로그 조회

- actor / target 프로필을 함께 조회 (target 은 없을 수 있음)
- 최신순, limit 개수만큼

"""

def recent_admin_logs(db: Session, *, limit: int):
    Actor = aliased(Profile)
    Target = aliased(Profile)

    return db.execute(
        select(AdminActionLog, Actor, Target)
        .join(Actor, Actor.id == AdminActionLog.actor_id)
        .outerjoin(Target, Target.id == AdminActionLog.target_user_id)
        .order_by(desc(AdminActionLog.created_at))
        .limit(limit)
    ).all()
