from typing import List

from fastapi import APIRouter, Depends, Response, status

from vocabapp.api.dependencies import get_current_user_id, get_session
from vocabapp.models.vocab import VocabItemCreate, VocabItemRead, VocabListCreate, VocabListRead
from vocabapp.services.vocab_service import VocabService


def get_vocab_service(db=Depends(get_session)) -> VocabService:
    return VocabService(db)


router = APIRouter(prefix="/vocab/lists", tags=["vocab"])


@router.get("", response_model=List[VocabListRead])
def list_vocab_lists(
    user_id: int = Depends(get_current_user_id),
    service: VocabService = Depends(get_vocab_service),
) -> List[VocabListRead]:
    return service.list_lists(user_id)


@router.post("", response_model=VocabListRead, status_code=status.HTTP_201_CREATED)
def create_vocab_list(
    payload: VocabListCreate,
    user_id: int = Depends(get_current_user_id),
    service: VocabService = Depends(get_vocab_service),
) -> VocabListRead:
    return service.create_manual_list(user_id, payload)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vocab_list(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    service: VocabService = Depends(get_vocab_service),
) -> Response:
    service.delete_list(user_id, list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{list_id}/items", response_model=VocabItemRead, status_code=status.HTTP_201_CREATED)
def add_vocab_item(
    list_id: int,
    payload: VocabItemCreate,
    user_id: int = Depends(get_current_user_id),
    service: VocabService = Depends(get_vocab_service),
) -> VocabItemRead:
    return service.add_item(user_id, list_id, payload)


__all__ = ["router"]
