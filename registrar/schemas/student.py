# registrar/schemas/student.py
from pydantic import BaseModel, Field, validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID


class StudentIn(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    birth_date: Optional[date] = None
    sex: Optional[Literal["M", "F"]] = None
    nationality: Optional[str] = Field(None, max_length=50)
    birthplace: Optional[str] = Field(None, max_length=100)
    grade_level: str = Field(..., max_length=20)
    previous_school: Optional[str] = Field(None, max_length=200)
    blood_group: Optional[str] = Field(None, max_length=5)
    medical_conditions: Optional[str] = None
    medications: Optional[str] = None
    physician_name: Optional[str] = Field(None, max_length=200)

    @validator("*", pre=True)
    def blank_to_none(cls, v):
        # HTML forms submit empty inputs as ""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @validator("first_name", "last_name", "grade_level")
    def validate_required(cls, v):
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @validator("sex", pre=True)
    def normalize_sex(cls, v):
        return v.upper() if isinstance(v, str) else v


class StudentSummary(BaseModel):
    """A student as listed by search and export"""
    id: UUID
    matricule: str
    first_name: str
    last_name: str
    birth_date: Optional[date]
    sex: Optional[str]
    nationality: Optional[str]
    grade_level: Optional[str]
    created_at: datetime
    services: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None

    class Config:
        from_attributes = True


class StudentSearchOut(BaseModel):
    students: List[StudentSummary]
    total: int
