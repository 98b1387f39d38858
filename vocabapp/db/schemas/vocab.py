from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class VocabList(SQLModel, table=True):
    __tablename__ = "vocab_lists"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    name: str = Field(max_length=120)
    source: str = Field(default="manual", max_length=20)
    original_filename: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class VocabItem(SQLModel, table=True):
    __tablename__ = "vocab_items"
    __table_args__ = (
        UniqueConstraint("list_id", "normalized_term", name="ux_vocab_items_list_term"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    list_id: int = Field(foreign_key="vocab_lists.id", index=True)
    term: str
    normalized_term: str = Field(index=True)
    part_of_speech: str = Field(max_length=32)
    definition: str = Field(default="")
    example_sentence: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
