from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


FLASHCARD_STATES = ("pending", "memorizing", "matured", "deep_matured", "suspended")


class Flashcard(SQLModel, table=True):
    __tablename__ = "flashcards"
    __table_args__ = (UniqueConstraint("vocab_item_id", name="ux_flashcards_vocab_item"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    vocab_item_id: int = Field(foreign_key="vocab_items.id", index=True)
    state: str = Field(default="pending", index=True, max_length=20)
    due_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    last_reviewed_at: Optional[datetime] = Field(default=None)
    interval_days: int = Field(default=0)
    ease_factor: float = Field(default=2.5)
    review_count: int = Field(default=0)
    lapse_count: int = Field(default=0)
    correct_streak: int = Field(default=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Review(SQLModel, table=True):
    __tablename__ = "reviews"

    id: Optional[int] = Field(default=None, primary_key=True)
    flashcard_id: int = Field(foreign_key="flashcards.id", index=True)
    result: str = Field(max_length=10)
    score: Optional[int] = Field(default=None)
    user_input: Optional[str] = Field(default=None)
    feedback_text: Optional[str] = Field(default=None)
    reviewed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
