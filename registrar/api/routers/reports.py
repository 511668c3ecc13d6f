# registrar/api/routers/reports.py - Statistics and spreadsheet export
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import Dict, Any
import logging

from registrar.core.db import get_db
from registrar.api.deps.auth import get_current_user
from registrar.schemas.reporting import StatisticsOut
from registrar.services.reporting_service import ReportingService
from registrar.services.export_service import build_enrollment_workbook, XLSX_CONTENT_TYPE

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/statistics", response_model=StatisticsOut)
def get_statistics(
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ReportingService(db).statistics()


@router.get("/export/excel")
def export_excel(
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Download every enrollment as an .xlsx workbook"""
    rows = ReportingService(db).export_rows()
    content = build_enrollment_workbook(rows)

    logger.info(f"Enrollment export by {ctx['user'].username}: {len(rows)} student(s)")

    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": 'attachment; filename="enrollments.xlsx"'},
    )
