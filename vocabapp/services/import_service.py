from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session as DBSession, select

from vocabapp.core.exceptions import ImportValidationError, NotFoundError
from vocabapp.db.schemas import ImportJob
from vocabapp.imports.constants import IMPORT_ID_PREFIX, MAX_ERROR_SAMPLE_SIZE
from vocabapp.imports.parser import ParsedImportRow, parse_csv_for_import, read_headers
from vocabapp.imports.validation import CsvSchemaError
from vocabapp.models.import_job import (
    CreateImportRequest,
    ImportErrorSummary,
    ImportJobRead,
    ImportRowError,
)
from vocabapp.services.vocab_service import (
    VOCAB_ITEM_UNIQUE_CONSTRAINT,
    VocabService,
    is_unique_violation,
)

logger = logging.getLogger(__name__)

IMPORT_IDEMPOTENCY_CONSTRAINT = "ux_import_jobs_user_idempotency"

_IMPORT_ID_PATTERN = re.compile(rf"^(?:{IMPORT_ID_PREFIX})?(\d+)$")


def format_import_id(job_id: int) -> str:
    return f"{IMPORT_ID_PREFIX}{job_id}"


def parse_import_id(value: str) -> Optional[int]:
    """Accept ``imp_42`` or ``42``; anything else is ``None``."""
    match = _IMPORT_ID_PATTERN.match(value.strip())
    if not match:
        return None
    job_id = int(match.group(1))
    return job_id if job_id > 0 else None


def resolve_terminal_status(inserted_count: int, duplicate_count: int, invalid_count: int) -> str:
    if invalid_count > 0 and inserted_count == 0 and duplicate_count == 0:
        return "failed"
    if invalid_count > 0:
        return "partial_success"
    return "completed"


def build_error_summary(errors: List[ImportRowError]) -> Optional[dict]:
    if not errors:
        return None
    summary = ImportErrorSummary(sample=errors[:MAX_ERROR_SAMPLE_SIZE], total_errors=len(errors))
    return summary.model_dump()


def to_import_job_read(job: ImportJob) -> ImportJobRead:
    return ImportJobRead(
        import_id=format_import_id(job.id),
        list_id=job.list_id,
        status=job.status,
        original_filename=job.original_filename,
        total_count=job.total_count,
        inserted_count=job.inserted_count,
        duplicate_count=job.duplicate_count,
        invalid_count=job.invalid_count,
        error_summary=job.error_summary,
        last_error=job.last_error,
        created_at=job.created_at,
        updated_at=job.updated_at,
        started_at=job.started_at,
        finished_at=job.finished_at,
    )


class ImportJobService:
    """Creates CSV import jobs and drives a claimed job to a terminal status.

    Every job moves ``queued -> parsing -> importing`` and ends in
    ``completed``, ``partial_success`` or ``failed``. Rows are inserted one
    transaction at a time so a bad row never undoes the rows before it.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session
        self.vocab_service = VocabService(session)

    def create_job(self, user_id: int, request: CreateImportRequest) -> ImportJob:
        if (request.list_id is None) == (request.list_name is None):
            raise ImportValidationError("Provide exactly one of listId or listName", code="INVALID_TARGET")
        if request.list_id is not None and not self.vocab_service.get_owned_list(user_id, request.list_id):
            raise ImportValidationError(
                "Target list does not exist or is not owned by user", code="INVALID_TARGET"
            )
        try:
            read_headers(request.csv_content)
        except CsvSchemaError as exc:
            logger.info(f"Rejected import from user {user_id}: {exc.code}")
            raise ImportValidationError(exc.message, code=exc.code) from exc

        job = ImportJob(
            user_id=user_id,
            list_id=request.list_id,
            status="queued",
            source="csv",
            original_filename=request.filename,
            idempotency_key=request.idempotency_key,
            payload={
                "csv_content": request.csv_content,
                "list_id": request.list_id,
                "list_name": request.list_name,
            },
        )
        self.session.add(job)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if request.idempotency_key and is_unique_violation(
                exc, IMPORT_IDEMPOTENCY_CONSTRAINT, "idempotency_key"
            ):
                existing = self._find_by_idempotency_key(user_id, request.idempotency_key)
                if existing:
                    logger.info(
                        f"Import job {existing.id} reused for idempotency key of user {user_id}"
                    )
                    return existing
            raise
        self.session.refresh(job)
        logger.info(f"Queued import job {job.id} for user {user_id} ({request.filename})")
        return job

    def get_job_for_user(self, job_id: int, user_id: int) -> ImportJob:
        statement = select(ImportJob).where(ImportJob.id == job_id).where(ImportJob.user_id == user_id)
        job = self.session.exec(statement).first()
        if not job:
            raise NotFoundError("Import not found")
        return job

    def process_job(self, job_id: int) -> None:
        """Claim ``job_id`` and run it; a job already in ``parsing`` is resumed."""
        job = self.claim_job(job_id)
        if job is None:
            statement = select(ImportJob).where(ImportJob.id == job_id).where(ImportJob.status == "parsing")
            job = self.session.exec(statement).first()
            if job is None:
                logger.debug(f"Import job {job_id} is not claimable, skipping")
                return
        self.run_claimed_job(job)

    def claim_job(self, job_id: int) -> Optional[ImportJob]:
        """Move a job from ``queued`` to ``parsing``.

        The conditional update is the only guard against two runners taking
        the same job; ``None`` means somebody else got there first.
        """
        now = datetime.now(timezone.utc)
        statement = (
            update(ImportJob)
            .where(ImportJob.id == job_id)
            .where(ImportJob.status == "queued")
            .values(status="parsing", started_at=now, updated_at=now, last_error=None, finished_at=None)
        )
        result = self.session.connection().execute(statement)
        self.session.commit()
        if result.rowcount == 0:
            return None
        logger.info(f"Claimed import job {job_id}")
        return self.session.get(ImportJob, job_id)

    def claim_next_queued(self) -> Optional[ImportJob]:
        while True:
            statement = (
                select(ImportJob.id)
                .where(ImportJob.status == "queued")
                .order_by(ImportJob.created_at, ImportJob.id)
                .limit(1)
            )
            next_id = self.session.exec(statement).first()
            if next_id is None:
                return None
            job = self.claim_job(next_id)
            if job is not None:
                return job

    def run_claimed_job(self, job: ImportJob) -> None:
        job_id = job.id
        try:
            self._run_import(job)
        except Exception as exc:
            logger.exception(f"Import job {job_id} failed unexpectedly")
            self.session.rollback()
            self._mark_failed(job_id, str(exc) or exc.__class__.__name__)

    def _run_import(self, job: ImportJob) -> None:
        job_id = job.id
        payload = job.payload or {}
        csv_content = payload.get("csv_content")
        if not isinstance(csv_content, str):
            message = "Import payload is missing CSV content"
            self._mark_failed(
                job_id,
                message,
                error_summary=build_error_summary(
                    [ImportRowError(row=0, code="MISSING_PAYLOAD", message=message)]
                ),
            )
            return

        try:
            parsed = parse_csv_for_import(csv_content)
        except CsvSchemaError as exc:
            logger.info(f"Import job {job_id} rejected: {exc.code}")
            self._mark_failed(
                job_id,
                exc.message,
                total_count=0,
                invalid_count=1,
                error_summary=build_error_summary(
                    [ImportRowError(row=exc.row, code=exc.code, message=exc.message)]
                ),
            )
            return

        list_id = self._resolve_target_list(job, payload)
        if list_id is None:
            return

        errors: List[ImportRowError] = list(parsed.errors)
        self._update_job(
            job_id,
            list_id=list_id,
            status="importing",
            total_count=parsed.total_count,
            invalid_count=len(errors),
        )

        inserted_count = 0
        duplicate_count = 0
        for row in parsed.valid_rows:
            outcome = self._insert_row(list_id, row)
            if outcome == "inserted":
                inserted_count += 1
            elif outcome == "duplicate":
                duplicate_count += 1
            else:
                errors.append(ImportRowError(row=row.row, code="ROW_INSERT_FAILED", message="Failed to insert row"))

        invalid_count = len(errors)
        status = resolve_terminal_status(inserted_count, duplicate_count, invalid_count)
        self._update_job(
            job_id,
            status=status,
            inserted_count=inserted_count,
            duplicate_count=duplicate_count,
            invalid_count=invalid_count,
            error_summary=build_error_summary(errors),
            payload=None,
            finished_at=datetime.now(timezone.utc),
        )
        logger.info(
            f"Import job {job_id} finished as {status}: inserted={inserted_count} "
            f"duplicates={duplicate_count} invalid={invalid_count}"
        )

    def _insert_row(self, list_id: int, row: ParsedImportRow) -> str:
        try:
            self.vocab_service.insert_item(
                list_id,
                term=row.term,
                normalized_term=row.normalized_term,
                part_of_speech=row.part_of_speech,
                definition=row.definition,
                example_sentence=row.example_sentence,
            )
        except IntegrityError as exc:
            if is_unique_violation(exc, VOCAB_ITEM_UNIQUE_CONSTRAINT, "normalized_term"):
                return "duplicate"
            logger.warning(f"Row {row.row} rejected by the database: {exc.orig}")
            return "failed"
        except SQLAlchemyError as exc:
            logger.warning(f"Row {row.row} could not be inserted: {exc}")
            return "failed"
        return "inserted"

    def _resolve_target_list(self, job: ImportJob, payload: dict) -> Optional[int]:
        job_id = job.id
        user_id = job.user_id
        list_id = payload.get("list_id")
        list_name = payload.get("list_name")
        if list_id:
            vocab_list = self.vocab_service.get_owned_list(user_id, list_id)
            if not vocab_list:
                self._mark_failed(job_id, "Target list does not exist or is not owned by user")
                return None
            return vocab_list.id
        if not list_name:
            self._mark_failed(job_id, "Target list name is required")
            return None
        vocab_list = self.vocab_service.create_list(
            user_id, list_name, source="csv", original_filename=job.original_filename
        )
        return vocab_list.id

    def _find_by_idempotency_key(self, user_id: int, idempotency_key: str) -> Optional[ImportJob]:
        statement = (
            select(ImportJob)
            .where(ImportJob.user_id == user_id)
            .where(ImportJob.idempotency_key == idempotency_key)
        )
        return self.session.exec(statement).first()

    def _mark_failed(self, job_id: int, message: str, **values: Any) -> None:
        self._update_job(
            job_id,
            status="failed",
            last_error=message,
            payload=None,
            finished_at=datetime.now(timezone.utc),
            **values,
        )
        logger.warning(f"Import job {job_id} failed: {message}")

    def _update_job(self, job_id: int, **values: Any) -> None:
        job = self.session.get(ImportJob, job_id)
        if not job:
            raise NotFoundError(f"Import job {job_id} not found")
        for key, value in values.items():
            setattr(job, key, value)
        job.updated_at = datetime.now(timezone.utc)
        self.session.add(job)
        self.session.commit()


__all__ = [
    "ImportJobService",
    "format_import_id",
    "parse_import_id",
    "resolve_terminal_status",
    "to_import_job_read",
]
