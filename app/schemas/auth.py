from pydantic import BaseModel, EmailStr, Field


# 학생 회원가입 요청 (role 은 항상 user)
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
    full_name: str = Field(min_length=1, max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
