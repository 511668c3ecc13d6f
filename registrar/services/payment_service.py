# registrar/services/payment_service.py - Payment listing and settlement
from sqlalchemy.orm import Session
from sqlalchemy import select
from datetime import datetime
from typing import List, Optional
from uuid import UUID
import logging

from registrar.core.exceptions import StudentNotFoundError, PaymentNotFoundError, PaymentStateError
from registrar.models.student import Student
from registrar.models.payment import Payment

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_student(self, matricule: str) -> List[Payment]:
        student_id = self.db.execute(
            select(Student.id).where(Student.matricule == matricule)
        ).scalar_one_or_none()

        if student_id is None:
            raise StudentNotFoundError(matricule)

        return list(self.db.execute(
            select(Payment)
            .where(Payment.student_id == student_id)
            .order_by(Payment.paid_at.desc())
        ).scalars())

    def settle(self, payment_id: UUID, user_id: Optional[UUID] = None) -> Payment:
        """Confirm a pending payment as received"""
        payment = self._pending(payment_id, "settle")
        payment.status = "complete"
        payment.settled_at = datetime.utcnow()
        self.db.commit()

        logger.info(f"Payment settled: {payment.id} ({payment.amount}) by {user_id}")
        return payment

    def cancel(self, payment_id: UUID) -> Payment:
        payment = self._pending(payment_id, "cancel")
        payment.status = "cancelled"
        self.db.commit()

        logger.info(f"Payment cancelled: {payment.id}")
        return payment

    def _pending(self, payment_id: UUID, action: str) -> Payment:
        payment = self.db.execute(
            select(Payment).where(Payment.id == payment_id).with_for_update()
        ).scalar_one_or_none()

        if payment is None:
            self.db.rollback()
            raise PaymentNotFoundError(payment_id)

        if payment.status != "pending":
            self.db.rollback()
            raise PaymentStateError(f"Cannot {action} a payment that is {payment.status}")

        return payment
