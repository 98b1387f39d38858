from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ImportRowError(BaseModel):
    row: int
    code: str
    message: str


class ImportErrorSummary(BaseModel):
    sample: List[ImportRowError] = Field(default_factory=list)
    total_errors: int = 0


class CreateImportRequest(BaseModel):
    filename: str
    csv_content: str
    list_id: Optional[int] = None
    list_name: Optional[str] = None
    idempotency_key: Optional[str] = None


class ImportJobCreated(BaseModel):
    import_id: str
    status: str


class ImportJobRead(BaseModel):
    import_id: str
    list_id: Optional[int] = None
    status: str
    original_filename: Optional[str] = None
    total_count: int
    inserted_count: int
    duplicate_count: int
    invalid_count: int
    error_summary: Optional[ImportErrorSummary] = None
    last_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProcessImportsResponse(BaseModel):
    processed: int
