# registrar/models/student.py
from __future__ import annotations
import uuid
from datetime import date, datetime
from sqlalchemy import String, Text, Date, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from registrar.models.base import Base


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # assigned once at enrollment, never updated
    matricule: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[date | None] = mapped_column(Date)
    sex: Mapped[str | None] = mapped_column(String(1))
    nationality: Mapped[str | None] = mapped_column(String(50))
    birthplace: Mapped[str | None] = mapped_column(String(100))
    grade_level: Mapped[str | None] = mapped_column(String(20), index=True)
    previous_school: Mapped[str | None] = mapped_column(String(200))
    blood_group: Mapped[str | None] = mapped_column(String(5))

    # Medical information
    medical_conditions: Mapped[str | None] = mapped_column(Text)
    medications: Mapped[str | None] = mapped_column(Text)
    physician_name: Mapped[str | None] = mapped_column(String(200))

    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    guardian_links: Mapped[list["StudentGuardian"]] = relationship(
        "StudentGuardian", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    emergency_contacts: Mapped[list["EmergencyContact"]] = relationship(
        "EmergencyContact", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    services: Mapped[list["StudentService"]] = relationship(
        "StudentService", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    documents: Mapped[list["Document"]] = relationship(
        "Document", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )
    re_enrollments: Mapped[list["ReEnrollment"]] = relationship(
        "ReEnrollment", back_populates="student", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("sex IN ('M','F')", name="ck_students_sex"),
        Index("ix_students_name", "last_name", "first_name"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
