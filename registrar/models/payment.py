# registrar/models/payment.py
from __future__ import annotations
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal
from sqlalchemy import String, Numeric, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from registrar.models.base import Base

PaymentType = Literal["enrollment", "re_enrollment"]
PaymentStatus = Literal["pending", "complete", "cancelled"]


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    payment_type: Mapped[PaymentType] = mapped_column(String(20), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_mode: Mapped[str | None] = mapped_column(String(50))  # cash, cheque, mobile money, ...
    reference: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[PaymentStatus] = mapped_column(String(16), nullable=False, default="complete")
    paid_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"))

    student: Mapped["Student"] = relationship("Student", back_populates="payments")

    __table_args__ = (
        CheckConstraint("payment_type IN ('enrollment','re_enrollment')", name="ck_payments_type"),
        CheckConstraint("status IN ('pending','complete','cancelled')", name="ck_payments_status"),
        CheckConstraint("amount >= 0", name="ck_payments_amount_positive"),
        Index("ix_payments_student_paid_at", "student_id", "paid_at"),
    )
