from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from vocabapp.imports.constants import (
    IMPORT_DEFAULT_PART_OF_SPEECH,
    MAX_IMPORT_ROW_COUNT,
    MAX_PART_OF_SPEECH_LENGTH,
    MAX_TERM_LENGTH,
    MAX_TEXT_FIELD_LENGTH,
)
from vocabapp.imports.normalize import normalize_term
from vocabapp.imports.tokenizer import tokenize_csv
from vocabapp.imports.validation import CsvSchemaError, validate_csv_headers
from vocabapp.models.import_job import ImportRowError


@dataclass
class ParsedImportRow:
    row: int
    term: str
    normalized_term: str
    definition: str
    part_of_speech: str
    example_sentence: Optional[str]


@dataclass
class ParseResult:
    total_count: int
    valid_rows: List[ParsedImportRow] = field(default_factory=list)
    errors: List[ImportRowError] = field(default_factory=list)


def read_headers(csv_content: str) -> List[str]:
    """Tokenize ``csv_content`` and validate only its header row."""
    rows = tokenize_csv(csv_content)
    if not rows:
        raise CsvSchemaError("MISSING_HEADERS", "CSV header row is required")
    return validate_csv_headers(rows[0])


def parse_csv_for_import(csv_content: str) -> ParseResult:
    """Turn raw CSV text into importable rows plus row-scoped errors.

    Header problems and an oversized file raise ``CsvSchemaError``; every
    other problem is recorded against its row and parsing moves on.
    Row numbers count the header as row 1.
    """
    rows = tokenize_csv(csv_content)
    if not rows:
        raise CsvSchemaError("MISSING_HEADERS", "CSV header row is required")
    headers = validate_csv_headers(rows[0])

    data_rows = rows[1:]
    if len(data_rows) > MAX_IMPORT_ROW_COUNT:
        raise CsvSchemaError(
            "ROW_LIMIT_EXCEEDED", f"CSV row count exceeds limit ({MAX_IMPORT_ROW_COUNT})"
        )

    result = ParseResult(total_count=len(data_rows))
    for index, record in enumerate(data_rows):
        row_number = index + 2
        if len(record) > len(headers):
            result.errors.append(
                ImportRowError(
                    row=row_number,
                    code="INVALID_COLUMN_COUNT",
                    message="Row has more columns than the header",
                )
            )
            continue
        padded = record + [""] * (len(headers) - len(record))
        values: Dict[str, str] = {
            header: value.strip() for header, value in zip(headers, padded)
        }
        error = _check_row(values)
        if error:
            code, message = error
            result.errors.append(ImportRowError(row=row_number, code=code, message=message))
            continue
        term = values["term"]
        example = values.get("exampleSentence", "")
        result.valid_rows.append(
            ParsedImportRow(
                row=row_number,
                term=term,
                normalized_term=normalize_term(term),
                definition=values.get("definition", ""),
                part_of_speech=values.get("partOfSpeech") or IMPORT_DEFAULT_PART_OF_SPEECH,
                example_sentence=example or None,
            )
        )
    return result


def _check_row(values: Dict[str, str]) -> Optional[tuple[str, str]]:
    term = values.get("term", "")
    if not term:
        return "MISSING_TERM", "term is required"
    if len(term) > MAX_TERM_LENGTH:
        return "TERM_TOO_LONG", f"term exceeds max length ({MAX_TERM_LENGTH})"
    if len(values.get("partOfSpeech", "")) > MAX_PART_OF_SPEECH_LENGTH:
        return (
            "PART_OF_SPEECH_TOO_LONG",
            f"partOfSpeech exceeds max length ({MAX_PART_OF_SPEECH_LENGTH})",
        )
    if len(values.get("definition", "")) > MAX_TEXT_FIELD_LENGTH:
        return "DEFINITION_TOO_LONG", f"definition exceeds max length ({MAX_TEXT_FIELD_LENGTH})"
    if len(values.get("exampleSentence", "")) > MAX_TEXT_FIELD_LENGTH:
        return (
            "EXAMPLE_SENTENCE_TOO_LONG",
            f"exampleSentence exceeds max length ({MAX_TEXT_FIELD_LENGTH})",
        )
    return None
