from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class StudyCard(BaseModel):
    flashcard_id: int
    vocab_item_id: int
    word: str
    part_of_speech: str
    definition: str
    example: Optional[str] = None
    state: str
    due_at: datetime


class StudyQueueRequest(BaseModel):
    limit: Optional[int] = None
    exclude_flashcard_ids: List[int] = Field(default_factory=list)


class StudyQueueResponse(BaseModel):
    cards: List[StudyCard]


class ReviewSubmission(BaseModel):
    flashcard_id: int
    result: Literal["pass", "fail"]
    score: int
    user_input: str = ""
    feedback_text: str = ""


class ReviewResult(BaseModel):
    success: bool
    next_due_at: datetime
    new_state: str
    interval_days: int
    ease_factor: float


class StudyStats(BaseModel):
    due_count: int
    today_reviews: int
    states: Dict[str, int] = Field(default_factory=dict)

