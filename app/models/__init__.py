# Base.metadata 에 모든 테이블을 등록하기 위한 import 모음
from app.models.user import User, Profile, Role  # noqa: F401
from app.models.program import Program, UserProgram  # noqa: F401
from app.models.step import Step, StepType, UserStepProgress, ProgressStatus  # noqa: F401
from app.models.admin_log import AdminActionLog, AdminAction  # noqa: F401
