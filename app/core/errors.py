"""
errors.py

도메인 예외(Exception) 정의 파일.

두 계열로 나뉜다.

1) AccessDenied 계열 (접근 제어 게이트)
   - Unauthenticated : 로그인 정보 없음 → /auth/login
   - ProfileMissing  : 프로필 레코드 없음 → /auth/login
   - Forbidden       : 라우트 그룹에 허용되지 않은 role → /unauthorized
   화면 내 에러로 노출하지 않고 항상 redirect로 처리한다. (app.main 핸들러)

2) WorkflowError 계열 (단계 진행 상태 머신)
   - DanglingReference : 존재하지 않는 step / user / progress 참조
   - InvalidTransition : 허용되지 않는 상태 전이
   - SubmissionInvalid : 단계 입력 필드 스키마 위반
   서비스 계층에서 raise, 라우터에서 rollback 후 HTTPException으로 변환한다.
   기존 서비스들이 ValueError를 쓰던 관례를 따라 ValueError를 상속한다.

"""

LOGIN_PATH = "/auth/login"
UNAUTHORIZED_PATH = "/unauthorized"


class AccessDenied(Exception):
    redirect_to: str = LOGIN_PATH
    reason: str = "access denied"

    def __init__(self, route_group: str | None = None):
        super().__init__(self.reason)
        self.route_group = route_group


class Unauthenticated(AccessDenied):
    redirect_to = LOGIN_PATH
    reason = "Not authenticated"


class ProfileMissing(AccessDenied):
    redirect_to = LOGIN_PATH
    reason = "Profile not found"


class Forbidden(AccessDenied):
    redirect_to = UNAUTHORIZED_PATH
    reason = "Forbidden"


class WorkflowError(ValueError):
    pass


class DanglingReference(WorkflowError):
    pass


class InvalidTransition(WorkflowError):
    pass


class SubmissionInvalid(WorkflowError):
    pass
