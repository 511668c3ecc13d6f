# registrar/api/routers/reenrollments.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from typing import Dict, Any
import logging

from registrar.core.db import get_db
from registrar.core.exceptions import StudentNotFoundError, ReEnrollmentError
from registrar.api.deps.auth import get_current_user
from registrar.schemas.enrollment import ReEnrollmentIn, ReEnrollmentOut
from registrar.services.reenrollment_service import ReEnrollmentService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{matricule}", response_model=ReEnrollmentOut)
def reenroll_student(
    matricule: str,
    data: ReEnrollmentIn,
    request: Request,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Move an enrolled student to a new grade level for a school year"""
    service = ReEnrollmentService(
        db,
        require_settlement=request.app.state.settings.PAYMENT_REQUIRE_SETTLEMENT,
    )

    try:
        service.reenroll(matricule, data, created_by=ctx["user"].id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ReEnrollmentError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return ReEnrollmentOut()
