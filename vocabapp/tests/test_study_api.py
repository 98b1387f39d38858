from datetime import datetime, timedelta, timezone
from typing import Dict, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from vocabapp.api.dependencies import get_session
from vocabapp.db.schemas import Flashcard, Review, VocabItem, VocabList
from vocabapp.main import app
from vocabapp.services.study_queue_service import StudyQueueService

USER = {"X-User-Id": "1"}


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


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator[TestClient, None, None]:
    def override_get_session() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = override_get_session
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(name="cards")
def cards_fixture(session: Session) -> Dict[str, int]:
    now = datetime.now(timezone.utc)
    own_list = VocabList(user_id=1, name="Mine")
    other_list = VocabList(user_id=2, name="Theirs")
    session.add(own_list)
    session.add(other_list)
    session.commit()
    session.refresh(own_list)
    session.refresh(other_list)

    layout = {
        "new": (own_list.id, "pending", now + timedelta(days=2)),
        "overdue": (own_list.id, "memorizing", now - timedelta(days=5)),
        "due": (own_list.id, "memorizing", now - timedelta(days=1)),
        "later": (own_list.id, "matured", now + timedelta(days=3)),
        "paused": (own_list.id, "suspended", now - timedelta(days=10)),
        "foreign": (other_list.id, "memorizing", now - timedelta(days=7)),
    }
    ids = {}
    for term, (list_id, state, due_at) in layout.items():
        item = VocabItem(list_id=list_id, term=term, normalized_term=term, part_of_speech="noun", definition=f"{term} def")
        session.add(item)
        session.commit()
        session.refresh(item)
        card = Flashcard(vocab_item_id=item.id, state=state, due_at=due_at)
        session.add(card)
        session.commit()
        session.refresh(card)
        ids[term] = card.id
    return ids


def test_queue_orders_new_then_most_overdue(client: TestClient, cards: Dict[str, int]) -> None:
    response = client.post("/study/queue", json={}, headers=USER)
    assert response.status_code == 200
    queue = response.json()["cards"]
    assert [card["word"] for card in queue] == ["new", "overdue", "due"]
    assert queue[0]["state"] == "pending"
    assert queue[0]["definition"] == "new def"
    assert queue[0]["flashcard_id"] == cards["new"]


def test_queue_respects_exclusions_and_limit(client: TestClient, cards: Dict[str, int]) -> None:
    response = client.post(
        "/study/queue",
        json={"limit": 1, "exclude_flashcard_ids": [cards["new"]]},
        headers=USER,
    )
    assert [card["word"] for card in response.json()["cards"]] == ["overdue"]


def test_queue_limit_is_clamped(session: Session, cards: Dict[str, int]) -> None:
    service = StudyQueueService(session)
    assert len(service.get_queue(1, limit=0)) == 3
    assert len(service.get_queue(1, limit=-5)) == 1


def test_queue_for_user_without_cards(client: TestClient, cards: Dict[str, int]) -> None:
    response = client.post("/study/queue", json={}, headers={"X-User-Id": "3"})
    assert response.json() == {"cards": []}


def test_review_route_schedules_card(client: TestClient, session: Session, cards: Dict[str, int]) -> None:
    response = client.post(
        "/study/review",
        json={"flashcard_id": cards["new"], "result": "pass", "score": 95, "user_input": "new"},
        headers=USER,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["new_state"] == "memorizing"
    assert body["interval_days"] == 1
    assert body["ease_factor"] == 2.6
    assert len(session.exec(select(Review)).all()) == 1

    queue = client.post("/study/queue", json={}, headers=USER).json()["cards"]
    assert [card["word"] for card in queue] == ["overdue", "due"]


def test_review_route_rejections(client: TestClient, cards: Dict[str, int]) -> None:
    foreign = client.post(
        "/study/review", json={"flashcard_id": cards["foreign"], "result": "pass", "score": 90}, headers=USER
    )
    assert foreign.status_code == 404

    suspended = client.post(
        "/study/review", json={"flashcard_id": cards["paused"], "result": "pass", "score": 90}, headers=USER
    )
    assert suspended.status_code == 400
    assert suspended.json()["code"] == "FLASHCARD_SUSPENDED"

    invalid = client.post(
        "/study/review", json={"flashcard_id": cards["due"], "result": "maybe", "score": 90}, headers=USER
    )
    assert invalid.status_code == 422


def test_stats(client: TestClient, cards: Dict[str, int]) -> None:
    before = client.get("/study/stats", headers=USER).json()
    assert before["due_count"] == 3
    assert before["today_reviews"] == 0
    assert before["states"] == {
        "pending": 1,
        "memorizing": 2,
        "matured": 1,
        "deep_matured": 0,
        "suspended": 1,
    }

    client.post("/study/review", json={"flashcard_id": cards["due"], "result": "fail", "score": 10}, headers=USER)
    after = client.get("/study/stats", headers=USER).json()
    assert after["today_reviews"] == 1
    assert after["due_count"] == 2


def test_study_routes_require_identity(client: TestClient) -> None:
    assert client.post("/study/queue", json={}).status_code == 401
    assert client.get("/study/stats", headers={"X-User-Id": "abc"}).status_code == 401
