from typing import Optional

from fastapi import APIRouter, Depends

from vocabapp.api.dependencies import get_session, verify_worker_secret
from vocabapp.config.settings import Settings, get_settings
from vocabapp.models.import_job import ProcessImportsResponse
from vocabapp.services.import_worker import ImportWorker


def get_import_worker(db=Depends(get_session)) -> ImportWorker:
    return ImportWorker(db)


router = APIRouter(prefix="/internal", tags=["internal"], dependencies=[Depends(verify_worker_secret)])


@router.post("/vocab-imports/process", response_model=ProcessImportsResponse)
def process_imports(
    limit: Optional[int] = None,
    worker: ImportWorker = Depends(get_import_worker),
    settings: Settings = Depends(get_settings),
) -> ProcessImportsResponse:
    batch_size = limit if limit is not None else settings.import_batch_size
    return ProcessImportsResponse(processed=worker.process_batch(batch_size))


__all__ = ["router"]
