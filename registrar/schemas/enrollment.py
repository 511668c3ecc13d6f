# registrar/schemas/enrollment.py - Enrollment and re-enrollment schemas
from pydantic import BaseModel, Field, validator
from typing import Optional, Dict, Mapping

from registrar.schemas.student import StudentIn
from registrar.schemas.guardian import GuardianIn, EmergencyContactIn
from registrar.schemas.payment import PaymentIn

STUDENT_FIELDS = (
    "first_name", "last_name", "birth_date", "sex", "nationality", "birthplace",
    "grade_level", "previous_school", "blood_group", "medical_conditions",
    "medications", "physician_name",
)
GUARDIAN_FIELDS = ("name", "phone", "email", "profession", "address", "relation")
DETAILS_SUFFIX = "_details"


class EnrollmentRequest(BaseModel):
    student: StudentIn
    guardian1: GuardianIn
    guardian2: Optional[GuardianIn] = None
    emergency_contact: EmergencyContactIn
    # Raw JSON list of service types; parsed inside the enrollment transaction
    services: str = "[]"
    service_details: Dict[str, str] = Field(default_factory=dict)
    payment: PaymentIn

    @classmethod
    def from_form(cls, fields: Mapping[str, str]) -> "EnrollmentRequest":
        """
        Build a request from flat multipart form fields.

        Guardians use ``guardian1_<field>`` / ``guardian2_<field>``, the emergency
        contact ``emergency_<field>``, payment ``payment_<field>``; service details
        arrive as ``<service>_details``. Guardian 2 is only considered when its
        name is filled in.
        """
        def guardian(prefix: str) -> dict:
            data = {key: fields.get(f"{prefix}_{key}") for key in GUARDIAN_FIELDS}
            data["full_name"] = data.pop("name")
            return data

        guardian2 = None
        if (fields.get("guardian2_name") or "").strip():
            guardian2 = guardian("guardian2")

        return cls(
            student={key: fields.get(key) for key in STUDENT_FIELDS},
            guardian1=guardian("guardian1"),
            guardian2=guardian2,
            emergency_contact={
                "name": fields.get("emergency_name"),
                "phone": fields.get("emergency_phone"),
                "relation": fields.get("emergency_relation"),
            },
            services=fields.get("services") or "[]",
            service_details={
                key[: -len(DETAILS_SUFFIX)]: value
                for key, value in fields.items()
                if key.endswith(DETAILS_SUFFIX) and value
            },
            payment={
                "amount": fields.get("payment_amount"),
                "mode": fields.get("payment_mode"),
                "reference": fields.get("payment_reference"),
            },
        )


class EnrollmentOut(BaseModel):
    success: bool = True
    matricule: str
    message: str = "Enrollment successful"


class ReEnrollmentIn(BaseModel):
    previous_grade_level: Optional[str] = Field(None, max_length=20)
    new_grade_level: str = Field(..., min_length=1, max_length=20)
    school_year: str = Field(..., min_length=4, max_length=20)
    payment: PaymentIn

    class Config:
        json_schema_extra = {
            "example": {
                "previous_grade_level": "CE1",
                "new_grade_level": "CE2",
                "school_year": "2025-2026",
                "payment": {"amount": "20000", "mode": "cash", "reference": "R-0042"}
            }
        }

    @validator("new_grade_level", "school_year")
    def strip_values(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()


class ReEnrollmentOut(BaseModel):
    success: bool = True
    message: str = "Re-enrollment successful"
