# registrar/models/reenrollment.py
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from registrar.models.base import Base


class ReEnrollment(Base):
    """A subsequent-year registration of an existing student"""
    __tablename__ = "re_enrollments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    previous_grade_level: Mapped[str | None] = mapped_column(String(20))
    new_grade_level: Mapped[str] = mapped_column(String(20), nullable=False)
    school_year: Mapped[str] = mapped_column(String(20), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))

    student: Mapped["Student"] = relationship("Student", back_populates="re_enrollments")
