import random
from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from vocabapp.core.exceptions import NotFoundError, ValidationError
from vocabapp.db.schemas import Flashcard, Review, VocabItem, VocabList
from vocabapp.models.study import ReviewSubmission
from vocabapp.services.review_scheduler import (
    MAX_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    ReviewScheduler,
    schedule_review,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


def _seed_card(session: Session, user_id: int = 1, state: str = "pending") -> Flashcard:
    vocab_list = VocabList(user_id=user_id, name="List")
    session.add(vocab_list)
    session.commit()
    session.refresh(vocab_list)
    item = VocabItem(list_id=vocab_list.id, term="alpha", normalized_term="alpha", part_of_speech="noun")
    session.add(item)
    session.commit()
    session.refresh(item)
    card = Flashcard(vocab_item_id=item.id, state=state)
    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def _schedule(result: str, **overrides):
    values = {
        "state": "pending",
        "interval_days": 0,
        "ease_factor": 2.5,
        "correct_streak": 0,
        "lapse_count": 0,
        "result": result,
        "now": NOW,
    }
    values.update(overrides)
    return schedule_review(**values)


def test_two_passes_from_new_card() -> None:
    first = _schedule("pass")
    assert first.state == "memorizing"
    assert first.interval_days == 1
    assert first.ease_factor == 2.6
    assert first.correct_streak == 1
    assert first.due_at == NOW + timedelta(days=1)

    second = _schedule(
        "pass",
        state=first.state,
        interval_days=first.interval_days,
        ease_factor=first.ease_factor,
        correct_streak=first.correct_streak,
    )
    assert second.state == "memorizing"
    assert second.interval_days == 3
    assert second.ease_factor == 2.7
    assert second.correct_streak == 2


def test_fail_resets_interval_and_counts_lapse() -> None:
    outcome = _schedule("fail", state="matured", interval_days=40, ease_factor=2.5, correct_streak=6, lapse_count=1)
    assert outcome.state == "memorizing"
    assert outcome.interval_days == 0
    assert outcome.ease_factor == 2.3
    assert outcome.correct_streak == 0
    assert outcome.lapse_count == 2
    assert outcome.due_at == NOW + timedelta(days=1)


def test_failed_new_card_stays_pending() -> None:
    assert _schedule("fail").state == "pending"


@pytest.mark.parametrize(
    "state, interval, expected",
    [
        ("memorizing", 20, "memorizing"),
        ("memorizing", 21, "matured"),
        ("matured", 89, "matured"),
        ("matured", 90, "deep_matured"),
        ("deep_matured", 200, "deep_matured"),
    ],
)
def test_promotion_thresholds(state: str, interval: int, expected: str) -> None:
    assert _schedule("pass", state=state, interval_days=interval).state == expected


def test_ease_factor_is_clamped() -> None:
    assert _schedule("pass", ease_factor=MAX_EASE_FACTOR).ease_factor == MAX_EASE_FACTOR
    assert _schedule("fail", ease_factor=MIN_EASE_FACTOR).ease_factor == MIN_EASE_FACTOR


def test_ease_stays_in_bounds_over_long_history() -> None:
    rng = random.Random(7)
    state, interval, ease, streak, lapses = "pending", 0, 2.5, 0, 0
    for _ in range(300):
        outcome = _schedule(
            rng.choice(["pass", "pass", "pass", "fail"]),
            state=state,
            interval_days=interval,
            ease_factor=ease,
            correct_streak=streak,
            lapse_count=lapses,
        )
        assert MIN_EASE_FACTOR <= outcome.ease_factor <= MAX_EASE_FACTOR
        assert 0 <= outcome.interval_days <= MAX_INTERVAL_DAYS
        assert outcome.due_at > NOW
        state, interval, ease = outcome.state, outcome.interval_days, outcome.ease_factor
        streak, lapses = outcome.correct_streak, outcome.lapse_count


def test_unknown_result_is_rejected() -> None:
    with pytest.raises(ValueError):
        _schedule("maybe")


def test_submit_review_updates_card_and_logs_review(session: Session) -> None:
    card = _seed_card(session)
    submission = ReviewSubmission(flashcard_id=card.id, result="pass", score=90, user_input="alpha")

    result = ReviewScheduler(session).submit_review(1, submission, now=NOW)

    assert result.success is True
    assert result.new_state == "memorizing"
    assert result.interval_days == 1
    assert result.next_due_at == NOW + timedelta(days=1)
    session.expire_all()
    stored = session.get(Flashcard, card.id)
    assert stored.state == "memorizing"
    assert stored.review_count == 1
    assert stored.ease_factor == 2.6
    reviews = session.exec(select(Review)).all()
    assert len(reviews) == 1
    assert reviews[0].result == "pass"
    assert reviews[0].score == 90
    assert reviews[0].user_input == "alpha"


def test_review_of_foreign_card_writes_nothing(session: Session) -> None:
    card = _seed_card(session, user_id=2)
    submission = ReviewSubmission(flashcard_id=card.id, result="pass", score=100)

    with pytest.raises(NotFoundError):
        ReviewScheduler(session).submit_review(1, submission, now=NOW)

    assert session.exec(select(Review)).all() == []
    assert session.get(Flashcard, card.id).review_count == 0


def test_review_of_missing_card(session: Session) -> None:
    with pytest.raises(NotFoundError):
        ReviewScheduler(session).submit_review(1, ReviewSubmission(flashcard_id=404, result="fail", score=0))


def test_suspended_card_cannot_be_reviewed(session: Session) -> None:
    card = _seed_card(session, state="suspended")
    with pytest.raises(ValidationError) as exc_info:
        ReviewScheduler(session).submit_review(1, ReviewSubmission(flashcard_id=card.id, result="pass", score=80))
    assert exc_info.value.code == "FLASHCARD_SUSPENDED"
    assert session.exec(select(Review)).all() == []


def test_failed_commit_leaves_card_and_log_untouched(session: Session, monkeypatch: pytest.MonkeyPatch) -> None:
    card = _seed_card(session)
    card_id = card.id

    def failing_commit() -> None:
        raise RuntimeError("database went away")

    monkeypatch.setattr(session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        ReviewScheduler(session).submit_review(1, ReviewSubmission(flashcard_id=card_id, result="pass", score=90))

    assert session.exec(select(Review)).all() == []
    stored = session.get(Flashcard, card_id)
    assert stored.state == "pending"
    assert stored.review_count == 0


def test_interval_is_capped() -> None:
    outcome = _schedule("pass", state="deep_matured", interval_days=MAX_INTERVAL_DAYS, ease_factor=3.0)
    assert outcome.interval_days == MAX_INTERVAL_DAYS
    assert outcome.due_at == NOW + timedelta(days=MAX_INTERVAL_DAYS)


def test_long_run_of_passes_keeps_scheduling(session: Session) -> None:
    card = _seed_card(session)
    scheduler = ReviewScheduler(session)
    for _ in range(30):
        result = scheduler.submit_review(1, ReviewSubmission(flashcard_id=card.id, result="pass", score=100), now=NOW)
        assert result.success is True

    assert result.interval_days == MAX_INTERVAL_DAYS
    assert result.new_state == "deep_matured"
    assert result.next_due_at == NOW + timedelta(days=MAX_INTERVAL_DAYS)
    session.expire_all()
    assert session.get(Flashcard, card.id).review_count == 30
    assert len(session.exec(select(Review)).all()) == 30
