from fastapi import APIRouter, Depends

from vocabapp.api.dependencies import get_current_user_id, get_session
from vocabapp.config.settings import Settings, get_settings
from vocabapp.models.study import (
    ReviewResult,
    ReviewSubmission,
    StudyQueueRequest,
    StudyQueueResponse,
    StudyStats,
)
from vocabapp.services.review_scheduler import ReviewScheduler
from vocabapp.services.study_queue_service import StudyQueueService


def get_study_queue_service(
    db=Depends(get_session), settings: Settings = Depends(get_settings)
) -> StudyQueueService:
    return StudyQueueService(db, default_limit=settings.study_queue_default_limit)


def get_review_scheduler(db=Depends(get_session)) -> ReviewScheduler:
    return ReviewScheduler(db)


router = APIRouter(prefix="/study", tags=["study"])


@router.post("/queue", response_model=StudyQueueResponse)
def get_study_queue(
    payload: StudyQueueRequest,
    user_id: int = Depends(get_current_user_id),
    service: StudyQueueService = Depends(get_study_queue_service),
) -> StudyQueueResponse:
    cards = service.get_queue(user_id, limit=payload.limit, exclude_ids=payload.exclude_flashcard_ids)
    return StudyQueueResponse(cards=cards)


@router.post("/review", response_model=ReviewResult)
def submit_review(
    payload: ReviewSubmission,
    user_id: int = Depends(get_current_user_id),
    scheduler: ReviewScheduler = Depends(get_review_scheduler),
) -> ReviewResult:
    return scheduler.submit_review(user_id, payload)


@router.get("/stats", response_model=StudyStats)
def get_study_stats(
    user_id: int = Depends(get_current_user_id),
    service: StudyQueueService = Depends(get_study_queue_service),
) -> StudyStats:
    return service.get_stats(user_id)


__all__ = ["router"]
