from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from vocabapp.imports.constants import (
    IMPORT_DEFAULT_PART_OF_SPEECH,
    MAX_LIST_NAME_LENGTH,
    MAX_PART_OF_SPEECH_LENGTH,
    MAX_TERM_LENGTH,
    MAX_TEXT_FIELD_LENGTH,
)


class VocabListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_LIST_NAME_LENGTH)


class VocabListRead(BaseModel):
    id: int
    user_id: int
    name: str
    source: str
    original_filename: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VocabItemCreate(BaseModel):
    term: str = Field(min_length=1, max_length=MAX_TERM_LENGTH)
    definition: str = Field(default="", max_length=MAX_TEXT_FIELD_LENGTH)
    part_of_speech: str = Field(default=IMPORT_DEFAULT_PART_OF_SPEECH, max_length=MAX_PART_OF_SPEECH_LENGTH)
    example_sentence: Optional[str] = Field(default=None, max_length=MAX_TEXT_FIELD_LENGTH)


class VocabItemRead(BaseModel):
    id: int
    list_id: int
    term: str
    normalized_term: str
    part_of_speech: str
    definition: str
    example_sentence: Optional[str] = None
    flashcard_id: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
