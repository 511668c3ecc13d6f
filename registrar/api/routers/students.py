# registrar/api/routers/students.py - Student search
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional

from registrar.core.db import get_db
from registrar.api.deps.auth import get_current_user
from registrar.schemas.student import StudentSearchOut
from registrar.services.reporting_service import ReportingService

router = APIRouter()


@router.get("/search", response_model=StudentSearchOut)
def search_students(
    matricule: Optional[str] = Query(None, max_length=20, description="Part of the matricule"),
    name: Optional[str] = Query(None, max_length=100, description="Part of the first or last name"),
    grade_level: Optional[str] = Query(None, max_length=20, description="Exact grade level"),
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Search students; filters combine with AND and empty ones are ignored"""
    students = ReportingService(db).search(
        matricule=matricule,
        name=name,
        grade_level=grade_level,
    )
    return StudentSearchOut(students=students, total=len(students))
