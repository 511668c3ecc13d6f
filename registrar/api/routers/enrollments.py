# registrar/api/routers/enrollments.py - Multipart enrollment endpoint
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from typing import Dict, Any, List
import logging

from registrar.core.db import get_db
from registrar.core.exceptions import EnrollmentError, UploadRejectedError
from registrar.api.deps.auth import get_current_user
from registrar.schemas.enrollment import EnrollmentRequest, EnrollmentOut
from registrar.services.enrollment_service import EnrollmentService
from registrar.services.storage import DocumentStorage, IncomingFile

logger = logging.getLogger(__name__)
router = APIRouter()


async def read_form(request: Request, storage: DocumentStorage):
    """
    Split a multipart form into text fields and uploaded files.

    An upload whose spooled size is already over the limit is rejected
    without reading its content into memory.
    """
    form = await request.form()

    fields: Dict[str, str] = {}
    files: List[IncomingFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            # a file input left empty by the browser still sends a part
            if not value.filename:
                continue
            if value.size is not None:
                storage.check_size(value.filename, value.size)
            files.append(IncomingFile(
                field_name=key,
                filename=value.filename,
                content_type=value.content_type or "",
                content=await value.read(),
            ))
        else:
            fields[key] = value

    return fields, files


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    request: Request,
    ctx: Dict[str, Any] = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Enroll a new student.

    The form carries the student, one or two guardians, an emergency contact,
    the selected services and the enrollment payment. Each uploaded file's
    field name is its document type.
    """
    user = ctx["user"]
    settings = request.app.state.settings
    storage: DocumentStorage = request.app.state.storage

    try:
        fields, files = await read_form(request, storage)
        storage.validate(files)
    except UploadRejectedError as e:
        logger.warning(f"Enrollment upload rejected: {e.message}")
        raise HTTPException(
            status_code=(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE if e.too_large
                         else status.HTTP_400_BAD_REQUEST),
            detail=e.message
        )

    try:
        enrollment = EnrollmentRequest.from_form(fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    documents = await run_in_threadpool(storage.save, files)

    service = EnrollmentService(
        db,
        matricule_base=settings.MATRICULE_BASE,
        require_settlement=settings.PAYMENT_REQUIRE_SETTLEMENT,
    )

    try:
        student = await run_in_threadpool(service.enroll, enrollment, documents, user.id)
    except EnrollmentError as e:
        storage.remove(documents)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message
        )

    return EnrollmentOut(matricule=student.matricule)
