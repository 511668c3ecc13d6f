# registrar/services/enrollment_service.py - Enrollment transaction
from sqlalchemy.orm import Session
from typing import List, Optional, Dict, Any
from dataclasses import dataclass
from uuid import UUID
import json
import logging

from registrar.core.exceptions import EnrollmentError
from registrar.models.student import Student
from registrar.models.guardian import Guardian, StudentGuardian, EmergencyContact
from registrar.models.service import StudentService, SERVICE_TYPES
from registrar.models.payment import Payment
from registrar.models.document import Document
from registrar.schemas.enrollment import EnrollmentRequest
from registrar.schemas.guardian import GuardianIn
from registrar.services.matricule import allocate_matricule, DEFAULT_MATRICULE_BASE

logger = logging.getLogger(__name__)


@dataclass
class StoredDocument:
    """An upload already written to storage, waiting for its database row"""
    field_name: str
    filename: str
    path: str


def parse_services(raw_services: str, raw_details: Dict[str, str]) -> List[Dict[str, Any]]:
    """
    Decode the services selected on the enrollment form.

    ``raw_services`` is a JSON array of service type names; ``raw_details``
    maps a service type to a JSON object with its details.

    Raises:
        ValueError: unparseable list, unknown service type or details that are
            not a JSON object
    """
    services = json.loads(raw_services or "[]")
    if not isinstance(services, list):
        raise ValueError("Services must be a JSON list")

    selections = []
    for service_type in services:
        if service_type not in SERVICE_TYPES:
            raise ValueError(f"Unknown service type: {service_type!r}")

        details = json.loads(raw_details.get(service_type) or "{}")
        if not isinstance(details, dict):
            raise ValueError(f"Details for {service_type} must be a JSON object")

        selections.append({"service_type": service_type, "details": details})

    return selections


class EnrollmentService:
    """Creates a student with all of its dependent records as one atomic unit"""

    def __init__(
        self,
        db: Session,
        matricule_base: int = DEFAULT_MATRICULE_BASE,
        require_settlement: bool = False,
    ):
        self.db = db
        self.matricule_base = matricule_base
        self.payment_status = "pending" if require_settlement else "complete"

    def enroll(
        self,
        request: EnrollmentRequest,
        documents: Optional[List[StoredDocument]] = None,
        created_by: Optional[UUID] = None,
    ) -> Student:
        """
        Run the enrollment transaction and commit it.

        Statements are issued in a fixed order on the session's connection:
        matricule, student, primary guardian and link, optional second guardian
        and link, emergency contact, services, payment, documents.

        Returns:
            The committed Student

        Raises:
            EnrollmentError: any step failed; nothing was persisted
        """
        try:
            matricule = allocate_matricule(self.db, self.matricule_base)

            student = Student(
                matricule=matricule,
                created_by=created_by,
                **request.student.model_dump(),
            )
            self.db.add(student)
            self.db.flush()

            self._link_guardian(student, request.guardian1, is_primary=True)
            if request.guardian2 is not None:
                self._link_guardian(student, request.guardian2, is_primary=False)

            self.db.add(EmergencyContact(
                student_id=student.id,
                **request.emergency_contact.model_dump(),
            ))

            for selection in parse_services(request.services, request.service_details):
                self.db.add(StudentService(student_id=student.id, **selection))
            self.db.flush()

            self._record_payment(student, request, created_by)

            for document in documents or []:
                self.db.add(Document(
                    student_id=student.id,
                    document_type=document.field_name,
                    filename=document.filename,
                    path=document.path,
                ))

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Enrollment rolled back: {type(e).__name__}: {e}")
            raise EnrollmentError() from e

        logger.info(
            f"Student enrolled: {student.matricule} ({student.full_name}, {student.grade_level}) "
            f"with {len(documents or [])} document(s)"
        )
        return student

    def _link_guardian(self, student: Student, data: GuardianIn, is_primary: bool) -> Guardian:
        guardian = Guardian(**data.model_dump())
        self.db.add(guardian)
        self.db.flush()

        self.db.add(StudentGuardian(
            student_id=student.id,
            guardian_id=guardian.id,
            is_primary=is_primary,
        ))
        self.db.flush()
        return guardian

    def _record_payment(self, student: Student, request: EnrollmentRequest, created_by: Optional[UUID]) -> Payment:
        payment = Payment(
            student_id=student.id,
            payment_type="enrollment",
            amount=request.payment.amount,
            payment_mode=request.payment.mode,
            reference=request.payment.reference,
            status=self.payment_status,
            created_by=created_by,
        )
        self.db.add(payment)
        self.db.flush()
        return payment
