# registrar/models/user.py - Staff accounts (credential store)
from __future__ import annotations
import uuid
import enum
from datetime import datetime
from sqlalchemy import String, DateTime, Boolean, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from registrar.models.base import Base


class UserRole(str, enum.Enum):
    """Staff roles of the registration office"""
    ADMIN = "admin"
    SECRETARY = "secretary"
    ACCOUNTANT = "accountant"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.SECRETARY.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    last_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin','secretary','accountant')", name="ck_users_role"),
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role={self.role})>"
