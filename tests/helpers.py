# tests/helpers.py
import uuid

from sqlalchemy.orm import Session

from app.models.step import Step, StepType
from app.models.user import Profile, Role
from app.services.accounts import create_account

DEFAULT_PASSWORD = "Passw0rd!2024"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_account_in_db(
    db: Session,
    *,
    role: Role = Role.USER,
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    full_name: str = "테스트유저",
) -> Profile:
    email = email or f"{role.value}_{uuid.uuid4().hex[:6]}@test.com"
    profile = create_account(db, email=email, password=password, full_name=full_name, role=role)
    db.commit()
    db.refresh(profile)
    return profile


def login(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["access_token"]


def login_as(client, db: Session, role: Role) -> tuple[Profile, dict]:
    """role 계정을 만들고 로그인하여 (프로필, Authorization 헤더) 반환"""
    profile = create_account_in_db(db, role=role)
    token = login(client, profile.email)
    return profile, auth_header(token)


def make_step(
    db: Session,
    *,
    order_index: int,
    step_type: StepType = StepType.FORM,
    name: str | None = None,
    fields: list[dict] | None = None,
    is_active: bool = True,
) -> Step:
    step = Step(
        name=name or f"Step {order_index}",
        description=None,
        step_type=step_type,
        order_index=order_index,
        is_active=is_active,
        form_fields={"fields": fields or []},
    )
    db.add(step)
    db.commit()
    db.refresh(step)
    return step
