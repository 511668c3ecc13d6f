# registrar/api/routers/payments.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Dict, Any, List
from uuid import UUID

from registrar.core.db import get_db
from registrar.core.exceptions import StudentNotFoundError, PaymentNotFoundError, PaymentStateError
from registrar.api.deps.auth import get_current_user, require_accountant
from registrar.schemas.payment import PaymentOut
from registrar.services.payment_service import PaymentService

router = APIRouter()


@router.get("/student/{matricule}", response_model=List[PaymentOut])
def list_student_payments(
    matricule: str,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Payments of a student, most recent first"""
    try:
        return PaymentService(db).list_for_student(matricule)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{payment_id}/settle", response_model=PaymentOut)
def settle_payment(
    payment_id: UUID,
    ctx: Dict[str, Any] = Depends(require_accountant),
    db: Session = Depends(get_db)
):
    """Confirm that a pending payment was received"""
    try:
        return PaymentService(db).settle(payment_id, ctx["user"].id)
    except PaymentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PaymentStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)


@router.post("/{payment_id}/cancel", response_model=PaymentOut)
def cancel_payment(
    payment_id: UUID,
    ctx: Dict[str, Any] = Depends(require_accountant),
    db: Session = Depends(get_db)
):
    try:
        return PaymentService(db).cancel(payment_id)
    except PaymentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except PaymentStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
