from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import case, func, or_
from sqlmodel import Session as DBSession, select

from vocabapp.db.schemas import FLASHCARD_STATES, Flashcard, Review, VocabItem, VocabList
from vocabapp.models.study import StudyCard, StudyStats

DEFAULT_QUEUE_LIMIT = 20
MAX_QUEUE_LIMIT = 100


class StudyQueueService:
    def __init__(self, session: DBSession, default_limit: int = DEFAULT_QUEUE_LIMIT) -> None:
        self.session = session
        self.default_limit = default_limit

    def get_queue(
        self,
        user_id: int,
        *,
        limit: Optional[int] = None,
        exclude_ids: Iterable[int] = (),
        now: Optional[datetime] = None,
    ) -> List[StudyCard]:
        """Return the next cards to study.

        New (``pending``) cards come first, then cards whose due time has
        passed, most overdue first. Suspended cards are never returned.
        """
        now = now or datetime.now(timezone.utc)
        limit = max(1, min(limit or self.default_limit, MAX_QUEUE_LIMIT))
        excluded = list(exclude_ids)
        pending_first = case((Flashcard.state == "pending", 0), else_=1)
        statement = (
            select(Flashcard, VocabItem)
            .join(VocabItem, VocabItem.id == Flashcard.vocab_item_id)
            .join(VocabList, VocabList.id == VocabItem.list_id)
            .where(VocabList.user_id == user_id)
            .where(Flashcard.state != "suspended")
            .where(or_(Flashcard.state == "pending", Flashcard.due_at <= now))
        )
        if excluded:
            statement = statement.where(Flashcard.id.not_in(excluded))
        statement = statement.order_by(pending_first, Flashcard.due_at, Flashcard.id).limit(limit)
        rows = self.session.exec(statement).all()
        return [
            StudyCard(
                flashcard_id=card.id,
                vocab_item_id=item.id,
                word=item.term,
                part_of_speech=item.part_of_speech,
                definition=item.definition,
                example=item.example_sentence,
                state=card.state,
                due_at=card.due_at,
            )
            for card, item in rows
        ]

    def get_stats(self, user_id: int, now: Optional[datetime] = None) -> StudyStats:
        now = now or datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        due_count = self.session.exec(
            select(func.count(Flashcard.id))
            .select_from(Flashcard)
            .join(VocabItem, VocabItem.id == Flashcard.vocab_item_id)
            .join(VocabList, VocabList.id == VocabItem.list_id)
            .where(VocabList.user_id == user_id)
            .where(Flashcard.state != "suspended")
            .where(or_(Flashcard.state == "pending", Flashcard.due_at <= now))
        ).one()

        today_reviews = self.session.exec(
            select(func.count(Review.id))
            .select_from(Review)
            .join(Flashcard, Flashcard.id == Review.flashcard_id)
            .join(VocabItem, VocabItem.id == Flashcard.vocab_item_id)
            .join(VocabList, VocabList.id == VocabItem.list_id)
            .where(VocabList.user_id == user_id)
            .where(Review.reviewed_at >= start_of_day)
        ).one()

        state_rows = self.session.exec(
            select(Flashcard.state, func.count(Flashcard.id))
            .join(VocabItem, VocabItem.id == Flashcard.vocab_item_id)
            .join(VocabList, VocabList.id == VocabItem.list_id)
            .where(VocabList.user_id == user_id)
            .group_by(Flashcard.state)
        ).all()
        states = {state: 0 for state in FLASHCARD_STATES}
        for state, count in state_rows:
            states[state] = count

        return StudyStats(due_count=due_count or 0, today_reviews=today_reviews or 0, states=states)
