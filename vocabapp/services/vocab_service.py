from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session as DBSession, select

from vocabapp.core.exceptions import ConflictError, NotFoundError, ValidationError
from vocabapp.db.schemas import Flashcard, ImportJob, Review, VocabItem, VocabList
from vocabapp.imports.constants import IMPORT_DEFAULT_PART_OF_SPEECH
from vocabapp.imports.normalize import normalize_term
from vocabapp.models.vocab import VocabItemCreate, VocabItemRead, VocabListCreate, VocabListRead

logger = logging.getLogger(__name__)

VOCAB_ITEM_UNIQUE_CONSTRAINT = "ux_vocab_items_list_term"


def is_unique_violation(exc: IntegrityError, constraint_name: str, column: str) -> bool:
    """Tell whether ``exc`` came from the named unique constraint.

    PostgreSQL reports the constraint name; SQLite only lists the columns.
    """
    text = str(getattr(exc, "orig", None) or exc)
    if constraint_name in text:
        return True
    return "UNIQUE constraint failed" in text and f".{column}" in text


class VocabService:
    def __init__(self, session: DBSession) -> None:
        self.session = session

    def list_lists(self, user_id: int) -> List[VocabListRead]:
        statement = (
            select(VocabList).where(VocabList.user_id == user_id).order_by(VocabList.created_at.desc())
        )
        return [VocabListRead.model_validate(item) for item in self.session.exec(statement).all()]

    def get_owned_list(self, user_id: int, list_id: int) -> Optional[VocabList]:
        statement = select(VocabList).where(VocabList.id == list_id).where(VocabList.user_id == user_id)
        return self.session.exec(statement).first()

    def create_list(
        self,
        user_id: int,
        name: str,
        *,
        source: str = "manual",
        original_filename: Optional[str] = None,
    ) -> VocabList:
        vocab_list = VocabList(
            user_id=user_id,
            name=name,
            source=source,
            original_filename=original_filename,
        )
        self.session.add(vocab_list)
        self.session.commit()
        self.session.refresh(vocab_list)
        logger.info(f"Created {source} vocab list {vocab_list.id} for user {user_id}")
        return vocab_list

    def create_manual_list(self, user_id: int, data: VocabListCreate) -> VocabListRead:
        vocab_list = self.create_list(user_id, data.name.strip())
        return VocabListRead.model_validate(vocab_list)

    def delete_list(self, user_id: int, list_id: int) -> None:
        vocab_list = self.get_owned_list(user_id, list_id)
        if not vocab_list:
            raise NotFoundError("Vocab list not found")
        item_ids = self.session.exec(select(VocabItem.id).where(VocabItem.list_id == list_id)).all()
        if item_ids:
            cards = self.session.exec(select(Flashcard).where(Flashcard.vocab_item_id.in_(item_ids))).all()
            card_ids = [card.id for card in cards]
            if card_ids:
                for review in self.session.exec(select(Review).where(Review.flashcard_id.in_(card_ids))).all():
                    self.session.delete(review)
            for card in cards:
                self.session.delete(card)
            self.session.flush()
            for item in self.session.exec(select(VocabItem).where(VocabItem.list_id == list_id)).all():
                self.session.delete(item)
            self.session.flush()
        for job in self.session.exec(select(ImportJob).where(ImportJob.list_id == list_id)).all():
            job.list_id = None
            self.session.add(job)
        self.session.flush()
        self.session.delete(vocab_list)
        self.session.commit()
        logger.info(f"Deleted vocab list {list_id} with {len(item_ids)} items")

    def insert_item(
        self,
        list_id: int,
        *,
        term: str,
        normalized_term: str,
        part_of_speech: str,
        definition: str,
        example_sentence: Optional[str],
    ) -> Tuple[VocabItem, Flashcard]:
        """Insert an item and its pending flashcard as one transaction.

        Raises ``IntegrityError`` (already rolled back) when the list holds the
        normalized term.
        """
        item = VocabItem(
            list_id=list_id,
            term=term,
            normalized_term=normalized_term,
            part_of_speech=part_of_speech,
            definition=definition,
            example_sentence=example_sentence,
        )
        try:
            self.session.add(item)
            self.session.flush()
            card = Flashcard(vocab_item_id=item.id, state="pending", due_at=datetime.now(timezone.utc))
            self.session.add(card)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return item, card

    def add_item(self, user_id: int, list_id: int, data: VocabItemCreate) -> VocabItemRead:
        if not self.get_owned_list(user_id, list_id):
            raise NotFoundError("Vocab list not found")
        term = data.term.strip()
        normalized = normalize_term(term)
        if not normalized:
            raise ValidationError("Term must not be blank", code="MISSING_TERM")
        try:
            item, card = self.insert_item(
                list_id,
                term=term,
                normalized_term=normalized,
                part_of_speech=data.part_of_speech.strip() or IMPORT_DEFAULT_PART_OF_SPEECH,
                definition=data.definition.strip(),
                example_sentence=(data.example_sentence or "").strip() or None,
            )
        except IntegrityError as exc:
            if is_unique_violation(exc, VOCAB_ITEM_UNIQUE_CONSTRAINT, "normalized_term"):
                raise ConflictError(f"'{term}' is already in this list", code="DUPLICATE_TERM") from exc
            raise
        self.session.refresh(item)
        self.session.refresh(card)
        read = VocabItemRead.model_validate(item)
        read.flashcard_id = card.id
        return read
