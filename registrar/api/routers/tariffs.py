# registrar/api/routers/tariffs.py - Public fee schedule
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from registrar.core.db import get_db
from registrar.schemas.reporting import TariffOut
from registrar.services.reporting_service import ReportingService

router = APIRouter()


@router.get("", response_model=List[TariffOut])
def list_tariffs(db: Session = Depends(get_db)):
    """Fees per grade level, in school order"""
    return ReportingService(db).tariffs()
