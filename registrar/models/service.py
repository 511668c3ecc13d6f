# registrar/models/service.py - Optional services a student subscribes to
from __future__ import annotations
import uuid
from datetime import date
from typing import Any, Literal
from sqlalchemy import String, Date, JSON, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from registrar.models.base import Base

ServiceType = Literal["transport", "cafeteria", "martial_arts", "supplies"]
ServiceStatus = Literal["active", "suspended", "ended"]

SERVICE_TYPES: tuple[str, ...] = ("transport", "cafeteria", "martial_arts", "supplies")


class StudentService(Base):
    __tablename__ = "student_services"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_type: Mapped[ServiceType] = mapped_column(String(20), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    end_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[ServiceStatus] = mapped_column(String(16), nullable=False, default="active")

    student: Mapped["Student"] = relationship("Student", back_populates="services")

    __table_args__ = (
        CheckConstraint(
            "service_type IN ('transport','cafeteria','martial_arts','supplies')",
            name="ck_student_services_type",
        ),
        CheckConstraint("status IN ('active','suspended','ended')", name="ck_student_services_status"),
    )
