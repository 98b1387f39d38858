"""
Spaced-repetition scheduling for flashcards.

``schedule_review`` is the pure state machine: given a card's current
numbers and a pass/fail result it returns the next state, interval, ease
factor and due time. ``ReviewScheduler`` applies that outcome and appends
the review log entry in a single transaction.

States advance ``pending -> memorizing -> matured -> deep_matured``; any
failed review drops a card back to ``memorizing`` (a ``pending`` card stays
``pending``). Promotion out of ``memorizing`` requires a pass on a card
that was already scheduled at a long interval, so the review that first
reaches a long interval keeps the card in ``memorizing``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlmodel import Session as DBSession, select

from vocabapp.core.exceptions import NotFoundError, ValidationError
from vocabapp.db.schemas import Flashcard, Review, VocabItem, VocabList
from vocabapp.models.study import ReviewResult, ReviewSubmission

logger = logging.getLogger(__name__)

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 3.0
PASS_EASE_BONUS = 0.1
FAIL_EASE_PENALTY = 0.2
MATURE_INTERVAL_DAYS = 21
MAX_INTERVAL_DAYS = 36500
DEEP_MATURE_INTERVAL_DAYS = 90


@dataclass(frozen=True)
class ScheduleOutcome:
    state: str
    interval_days: int
    ease_factor: float
    correct_streak: int
    lapse_count: int
    due_at: datetime


def clamp_ease_factor(value: float) -> float:
    return round(min(MAX_EASE_FACTOR, max(MIN_EASE_FACTOR, value)), 2)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def schedule_review(
    *,
    state: str,
    interval_days: int,
    ease_factor: float,
    correct_streak: int,
    lapse_count: int,
    result: str,
    now: datetime,
) -> ScheduleOutcome:
    if result == "pass":
        new_ease = clamp_ease_factor(ease_factor + PASS_EASE_BONUS)
        if interval_days == 0:
            new_interval = 1
        else:
            new_interval = min(MAX_INTERVAL_DAYS, max(1, _round_half_up(interval_days * new_ease)))
        if state == "pending":
            new_state = "memorizing"
        elif state == "memorizing":
            new_state = "matured" if interval_days >= MATURE_INTERVAL_DAYS else "memorizing"
        elif state == "matured":
            new_state = "deep_matured" if interval_days >= DEEP_MATURE_INTERVAL_DAYS else "matured"
        else:
            new_state = state
        return ScheduleOutcome(
            state=new_state,
            interval_days=new_interval,
            ease_factor=new_ease,
            correct_streak=correct_streak + 1,
            lapse_count=lapse_count,
            due_at=now + timedelta(days=new_interval),
        )
    if result == "fail":
        return ScheduleOutcome(
            state="pending" if state == "pending" else "memorizing",
            interval_days=0,
            ease_factor=clamp_ease_factor(ease_factor - FAIL_EASE_PENALTY),
            correct_streak=0,
            lapse_count=lapse_count + 1,
            due_at=now + timedelta(days=1),
        )
    raise ValueError(f"Unknown review result: {result}")


class ReviewScheduler:
    def __init__(self, session: DBSession) -> None:
        self.session = session

    def submit_review(
        self, user_id: int, submission: ReviewSubmission, now: Optional[datetime] = None
    ) -> ReviewResult:
        card = self._get_owned_flashcard(user_id, submission.flashcard_id)
        if not card:
            raise NotFoundError("Flashcard not found or does not belong to user")
        if card.state == "suspended":
            raise ValidationError("Suspended flashcards cannot be reviewed", code="FLASHCARD_SUSPENDED")

        now = now or datetime.now(timezone.utc)
        outcome = schedule_review(
            state=card.state,
            interval_days=card.interval_days or 0,
            ease_factor=float(card.ease_factor),
            correct_streak=card.correct_streak or 0,
            lapse_count=card.lapse_count or 0,
            result=submission.result,
            now=now,
        )
        try:
            self.session.add(
                Review(
                    flashcard_id=card.id,
                    result=submission.result,
                    score=submission.score,
                    user_input=submission.user_input,
                    feedback_text=submission.feedback_text,
                    reviewed_at=now,
                )
            )
            card.state = outcome.state
            card.due_at = outcome.due_at
            card.interval_days = outcome.interval_days
            card.ease_factor = outcome.ease_factor
            card.correct_streak = outcome.correct_streak
            card.lapse_count = outcome.lapse_count
            card.review_count = (card.review_count or 0) + 1
            card.last_reviewed_at = now
            card.updated_at = now
            self.session.add(card)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.info(
            f"Flashcard {submission.flashcard_id} reviewed ({submission.result}): "
            f"state={outcome.state} interval={outcome.interval_days}d ease={outcome.ease_factor}"
        )
        return ReviewResult(
            success=True,
            next_due_at=outcome.due_at,
            new_state=outcome.state,
            interval_days=outcome.interval_days,
            ease_factor=outcome.ease_factor,
        )

    def _get_owned_flashcard(self, user_id: int, flashcard_id: int) -> Optional[Flashcard]:
        statement = (
            select(Flashcard)
            .join(VocabItem, VocabItem.id == Flashcard.vocab_item_id)
            .join(VocabList, VocabList.id == VocabItem.list_id)
            .where(Flashcard.id == flashcard_id)
            .where(VocabList.user_id == user_id)
        )
        return self.session.exec(statement).first()
