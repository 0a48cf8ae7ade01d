import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.user import Profile, utcnow
from app.db.base import Base


class Program(Base):
    """교환학생 프로그램 카탈로그.

    SUPER_ADMIN 이 생성/수정하며 단계(Step) 워크플로와는 독립적이다.
    """

    __tablename__ = "programs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    enrollments: Mapped[list["UserProgram"]] = relationship(back_populates="program")


class UserProgram(Base):
    """학생의 프로그램 등록(Enrollment) 레코드.

    한 학생은 0개 이상의 프로그램에 등록할 수 있고, 같은 프로그램에는 한 번만 등록된다.
    """

    __tablename__ = "user_programs"
    __table_args__ = (
        UniqueConstraint("user_id", "program_id", name="uq_user_programs_user_program"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    program_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    program: Mapped[Program] = relationship(back_populates="enrollments")
    profile: Mapped[Profile] = relationship()
