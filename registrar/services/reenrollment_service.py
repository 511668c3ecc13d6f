# registrar/services/reenrollment_service.py - Re-enrollment transaction
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional
from uuid import UUID
import logging

from registrar.core.exceptions import StudentNotFoundError, ReEnrollmentError
from registrar.models.student import Student
from registrar.models.payment import Payment
from registrar.models.reenrollment import ReEnrollment
from registrar.schemas.enrollment import ReEnrollmentIn

logger = logging.getLogger(__name__)


class ReEnrollmentService:
    """Moves an existing student to a new grade level and records the payment"""

    def __init__(self, db: Session, require_settlement: bool = False):
        self.db = db
        self.payment_status = "pending" if require_settlement else "complete"

    def reenroll(self, matricule: str, data: ReEnrollmentIn, created_by: Optional[UUID] = None) -> ReEnrollment:
        """
        Update the grade level, append the re-enrollment event and its payment,
        then commit; all or nothing.

        Raises:
            StudentNotFoundError: no student has this matricule; nothing was written
            ReEnrollmentError: a write failed and was rolled back
        """
        student = self.db.execute(
            select(Student).where(Student.matricule == matricule).with_for_update()
        ).scalar_one_or_none()

        if student is None:
            self.db.rollback()
            raise StudentNotFoundError(matricule)

        previous_level = student.grade_level
        if data.previous_grade_level and data.previous_grade_level != previous_level:
            logger.warning(
                f"Re-enrollment of {matricule}: submitted previous level {data.previous_grade_level!r} "
                f"differs from recorded level {previous_level!r}; keeping the recorded one"
            )

        try:
            student.grade_level = data.new_grade_level

            event = ReEnrollment(
                student_id=student.id,
                previous_grade_level=previous_level,
                new_grade_level=data.new_grade_level,
                school_year=data.school_year,
                created_by=created_by,
            )
            self.db.add(event)

            self.db.add(Payment(
                student_id=student.id,
                payment_type="re_enrollment",
                amount=data.payment.amount,
                payment_mode=data.payment.mode,
                reference=data.payment.reference,
                status=self.payment_status,
                created_by=created_by,
            ))

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Re-enrollment of {matricule} rolled back: {type(e).__name__}: {e}")
            raise ReEnrollmentError() from e

        logger.info(f"Student re-enrolled: {matricule} {previous_level} -> {data.new_grade_level} ({data.school_year})")
        return event
