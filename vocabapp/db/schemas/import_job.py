from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel


IMPORT_TERMINAL_STATUSES = ("completed", "partial_success", "failed")


class ImportJob(SQLModel, table=True):
    __tablename__ = "import_jobs"
    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="ux_import_jobs_user_idempotency"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    list_id: Optional[int] = Field(default=None, foreign_key="vocab_lists.id")
    status: str = Field(default="queued", index=True)
    source: str = Field(default="csv")
    original_filename: Optional[str] = None
    total_count: int = Field(default=0)
    inserted_count: int = Field(default=0)
    duplicate_count: int = Field(default=0)
    invalid_count: int = Field(default=0)
    error_summary: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    idempotency_key: Optional[str] = Field(default=None, max_length=120)
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    last_error: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
