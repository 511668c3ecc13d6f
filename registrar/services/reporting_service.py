# registrar/services/reporting_service.py - Read-only search, statistics and export queries
from sqlalchemy.orm import Session
from sqlalchemy import select, func, or_, and_
from typing import List, Optional, Dict, Any
from datetime import datetime, timedelta
from uuid import UUID
import logging

from registrar.models.student import Student
from registrar.models.guardian import Guardian, StudentGuardian
from registrar.models.service import StudentService
from registrar.models.tariff import Tariff
from registrar.schemas.student import StudentSummary
from registrar.schemas.reporting import (
    StatisticsOut,
    SexCount,
    GradeLevelCount,
    ServiceCount,
)

logger = logging.getLogger(__name__)

NEW_STUDENT_WINDOW_DAYS = 30


class ReportingService:
    def __init__(self, db: Session):
        self.db = db

    def search(
        self,
        matricule: Optional[str] = None,
        name: Optional[str] = None,
        grade_level: Optional[str] = None,
    ) -> List[StudentSummary]:
        """
        Find students matching every supplied filter.

        Args:
            matricule: substring of the matricule
            name: substring of the first or the last name, case-insensitive
            grade_level: exact grade level

        Filter values are bound parameters with LIKE wildcards escaped, so
        ``%`` or ``_`` in user input match literally.
        """
        conditions = self._filters(matricule, name, grade_level)
        rows = self.db.execute(self._summary_query().where(*conditions)).all()
        return self._summaries(rows, conditions)

    def export_rows(self) -> List[StudentSummary]:
        """Every student with services and primary guardian, for spreadsheet export"""
        return self._summaries(self.db.execute(self._summary_query()).all(), [])

    def statistics(self, now: Optional[datetime] = None) -> StatisticsOut:
        """Aggregate counts over the student table; each aggregate is independent"""
        now = now or datetime.utcnow()
        since = now - timedelta(days=NEW_STUDENT_WINDOW_DAYS)

        total = self.db.execute(select(func.count(Student.id))).scalar_one()

        by_sex = self.db.execute(
            select(Student.sex, func.count(Student.id))
            .group_by(Student.sex)
            .order_by(Student.sex)
        ).all()

        by_grade_level = self.db.execute(
            select(Student.grade_level, func.count(Student.id))
            .group_by(Student.grade_level)
            .order_by(Student.grade_level)
        ).all()

        new_students = self.db.execute(
            select(func.count(Student.id)).where(Student.created_at >= since)
        ).scalar_one()

        by_service = self.db.execute(
            select(StudentService.service_type, func.count(StudentService.id))
            .group_by(StudentService.service_type)
            .order_by(StudentService.service_type)
        ).all()

        return StatisticsOut(
            total=total,
            by_sex=[SexCount(sex=sex, count=count) for sex, count in by_sex],
            by_grade_level=[GradeLevelCount(grade_level=level, count=count) for level, count in by_grade_level],
            new_last_30_days=new_students,
            by_service_type=[ServiceCount(service_type=kind, count=count) for kind, count in by_service],
        )

    def tariffs(self) -> List[Tariff]:
        return list(self.db.execute(select(Tariff).order_by(Tariff.position, Tariff.grade_level)).scalars())

    def _filters(
        self,
        matricule: Optional[str],
        name: Optional[str],
        grade_level: Optional[str],
    ) -> List[Any]:
        conditions = []
        if matricule:
            conditions.append(Student.matricule.contains(matricule, autoescape=True))
        if name:
            conditions.append(
                or_(
                    Student.first_name.icontains(name, autoescape=True),
                    Student.last_name.icontains(name, autoescape=True),
                )
            )
        if grade_level:
            conditions.append(Student.grade_level == grade_level)
        return conditions

    def _summary_query(self):
        return (
            select(Student, Guardian.full_name, Guardian.phone)
            .outerjoin(
                StudentGuardian,
                and_(StudentGuardian.student_id == Student.id, StudentGuardian.is_primary.is_(True)),
            )
            .outerjoin(Guardian, Guardian.id == StudentGuardian.guardian_id)
            .order_by(Student.matricule)
        )

    def _active_services(self, conditions: List[Any]) -> Dict[UUID, List[str]]:
        """Active service types per student, for the students matching ``conditions``"""
        rows = self.db.execute(
            select(StudentService.student_id, StudentService.service_type)
            .join(Student, Student.id == StudentService.student_id)
            .where(StudentService.status == "active", *conditions)
            .distinct()
            .order_by(StudentService.service_type)
        ).all()

        services: Dict[UUID, List[str]] = {}
        for student_id, service_type in rows:
            services.setdefault(student_id, []).append(service_type)
        return services

    def _summaries(self, rows: List[Any], conditions: List[Any]) -> List[StudentSummary]:
        if not rows:
            return []
        services = self._active_services(conditions)

        return [
            StudentSummary(
                id=student.id,
                matricule=student.matricule,
                first_name=student.first_name,
                last_name=student.last_name,
                birth_date=student.birth_date,
                sex=student.sex,
                nationality=student.nationality,
                grade_level=student.grade_level,
                created_at=student.created_at,
                services=",".join(services[student.id]) if student.id in services else None,
                guardian_name=guardian_name,
                guardian_phone=guardian_phone,
            )
            for student, guardian_name, guardian_phone in rows
        ]
