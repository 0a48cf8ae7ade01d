from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import Role


# 🔹 SUPER_ADMIN 의 role 변경 요청용
class RoleUpdate(BaseModel):
    role: Role


# 🔹 SUPER_ADMIN 이 관리자 계정을 만들 때 사용 (학생은 /auth/register 로 가입, role=user 불가)
class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
    full_name: str = Field(min_length=1, max_length=100)
    role: Role = Role.ADMIN


# 🔹 프로필 응답용 (필요한 필드만)
class ProfileResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: Role
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
