from __future__ import annotations

from typing import List, Optional, Sequence

from vocabapp.core.exceptions import ImportValidationError
from vocabapp.imports.constants import (
    IMPORT_ALLOWED_HEADERS,
    IMPORT_REQUIRED_HEADERS,
    MAX_IDEMPOTENCY_KEY_LENGTH,
    MAX_IMPORT_FILE_SIZE_BYTES,
    MAX_LIST_NAME_LENGTH,
)
from vocabapp.models.import_job import CreateImportRequest


class CsvSchemaError(Exception):
    """Raised when a CSV file cannot be imported at all (header or size problems)."""

    def __init__(self, code: str, message: str, row: int = 1) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.row = row


def validate_csv_headers(headers: Sequence[str]) -> List[str]:
    """Check a header row and return the trimmed header names.

    Raises ``CsvSchemaError`` on the first problem found; a header row is
    either accepted whole or not at all.
    """
    normalized = [header.strip() for header in headers]
    if not normalized or not any(normalized):
        raise CsvSchemaError("MISSING_HEADERS", "CSV header row is required")
    if len(set(normalized)) != len(normalized):
        raise CsvSchemaError("DUPLICATE_HEADERS", "CSV headers must not contain duplicates")
    unknown = [header for header in normalized if header not in IMPORT_ALLOWED_HEADERS]
    if unknown:
        raise CsvSchemaError("UNKNOWN_HEADERS", f"Unsupported headers: {', '.join(unknown)}")
    missing = [header for header in IMPORT_REQUIRED_HEADERS if header not in normalized]
    if missing:
        raise CsvSchemaError(
            "MISSING_REQUIRED_HEADERS", f"Missing required headers: {', '.join(missing)}"
        )
    return normalized


def validate_create_import_request(
    *,
    filename: Optional[str],
    content: Optional[bytes],
    list_id: Optional[str] = None,
    list_name: Optional[str] = None,
    idempotency_key: Optional[str] = None,
) -> CreateImportRequest:
    if content is None or not filename:
        raise ImportValidationError("CSV file is required", code="MISSING_FILE")
    if not filename.lower().endswith(".csv"):
        raise ImportValidationError("Only CSV files are supported", code="INVALID_FILE_TYPE")
    if len(content) > MAX_IMPORT_FILE_SIZE_BYTES:
        raise ImportValidationError(
            f"CSV file exceeds max size ({MAX_IMPORT_FILE_SIZE_BYTES} bytes)",
            code="FILE_TOO_LARGE",
        )
    try:
        csv_content = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportValidationError("CSV file must be UTF-8 encoded", code="INVALID_FILE_ENCODING") from exc

    raw_list_id = (list_id or "").strip()
    raw_list_name = (list_name or "").strip()
    raw_key = (idempotency_key or "").strip()

    if bool(raw_list_id) == bool(raw_list_name):
        raise ImportValidationError("Provide exactly one of listId or listName", code="INVALID_TARGET")

    parsed_list_id: Optional[int] = None
    if raw_list_id:
        if not raw_list_id.isdigit() or int(raw_list_id) <= 0:
            raise ImportValidationError("listId must be a positive integer", code="INVALID_LIST_ID")
        parsed_list_id = int(raw_list_id)

    if len(raw_list_name) > MAX_LIST_NAME_LENGTH:
        raise ImportValidationError(
            f"listName must be {MAX_LIST_NAME_LENGTH} characters or fewer", code="INVALID_LIST_NAME"
        )
    if len(raw_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
        raise ImportValidationError(
            f"idempotencyKey must be {MAX_IDEMPOTENCY_KEY_LENGTH} characters or fewer",
            code="INVALID_IDEMPOTENCY_KEY",
        )

    return CreateImportRequest(
        filename=filename,
        csv_content=csv_content,
        list_id=parsed_list_id,
        list_name=raw_list_name or None,
        idempotency_key=raw_key or None,
    )
