from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from vocabapp.api.dependencies import get_current_user_id, get_session
from vocabapp.core.exceptions import ValidationError
from vocabapp.imports.validation import validate_create_import_request
from vocabapp.models.import_job import ImportJobCreated, ImportJobRead
from vocabapp.services.import_service import (
    ImportJobService,
    format_import_id,
    parse_import_id,
    to_import_job_read,
)


def get_import_service(db=Depends(get_session)) -> ImportJobService:
    return ImportJobService(db)


router = APIRouter(prefix="/vocab/imports", tags=["imports"])


@router.post("", response_model=ImportJobCreated, status_code=status.HTTP_202_ACCEPTED)
def create_import(
    file: Optional[UploadFile] = File(default=None),
    list_id: Optional[str] = Form(default=None, alias="listId"),
    list_name: Optional[str] = Form(default=None, alias="listName"),
    idempotency_key: Optional[str] = Form(default=None, alias="idempotencyKey"),
    user_id: int = Depends(get_current_user_id),
    service: ImportJobService = Depends(get_import_service),
) -> ImportJobCreated:
    content = file.file.read() if file is not None else None
    request = validate_create_import_request(
        filename=file.filename if file is not None else None,
        content=content,
        list_id=list_id,
        list_name=list_name,
        idempotency_key=idempotency_key,
    )
    job = service.create_job(user_id, request)
    return ImportJobCreated(import_id=format_import_id(job.id), status=job.status)


@router.get("/{import_id}", response_model=ImportJobRead)
def get_import(
    import_id: str,
    user_id: int = Depends(get_current_user_id),
    service: ImportJobService = Depends(get_import_service),
) -> ImportJobRead:
    job_id = parse_import_id(import_id)
    if job_id is None:
        raise ValidationError("Invalid importId", code="INVALID_IMPORT_ID")
    return to_import_job_read(service.get_job_for_user(job_id, user_id))


__all__ = ["router"]
