"""

SUPER_ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 SUPERADMIN_* 환경 변수를 읽어
  User + Profile(role=super_admin) 을 생성한다.
- 이미 SUPER_ADMIN 프로필이 존재하면 생성하지 않고 종료한다.

사용 목적:
- /super-admin route group(프로그램/단계 카탈로그, role 관리)에 접근할 수 있는
  최상위 관리자 계정을 안전하게 초기화하기 위함
- role 변경은 SUPER_ADMIN 만 할 수 있으므로 첫 계정은 이 스크립트로만 만든다

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_superadmin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from app.db.session import SessionLocal
from app.models.user import Role
from app.services.accounts import create_account, get_user_by_email
from app.services.admin import count_super_admins



def main():
    db = SessionLocal()
    try:
        if count_super_admins(db) > 0:
            print("✅ SUPER_ADMIN already exists. Skip creation.")
            return

        email = os.environ["SUPERADMIN_EMAIL"]
        password = os.environ["SUPERADMIN_PASSWORD"]
        full_name = os.environ.get("SUPERADMIN_NAME", "Super Admin")

        if get_user_by_email(db, email):
            raise RuntimeError("Email already exists but is not SUPER_ADMIN")

        create_account(
            db,
            email=email,
            password=password,
            full_name=full_name,
            role=Role.SUPER_ADMIN,
        )
        db.commit()

        print(f"🚀 SUPER_ADMIN created: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
