# registrar/models/__init__.py - Import all models so SQLAlchemy can discover them

from registrar.models.base import Base

from registrar.models.user import User, UserRole
from registrar.models.student import Student
from registrar.models.guardian import Guardian, StudentGuardian, EmergencyContact
from registrar.models.service import StudentService, SERVICE_TYPES
from registrar.models.payment import Payment
from registrar.models.document import Document
from registrar.models.reenrollment import ReEnrollment
from registrar.models.tariff import Tariff, MatriculeCounter

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Student",
    "Guardian",
    "StudentGuardian",
    "EmergencyContact",
    "StudentService",
    "SERVICE_TYPES",
    "Payment",
    "Document",
    "ReEnrollment",
    "Tariff",
    "MatriculeCounter",
]
