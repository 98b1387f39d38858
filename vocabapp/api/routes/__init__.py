from fastapi import APIRouter

from . import imports, internal, study, vocab

api_router = APIRouter()
api_router.include_router(vocab.router)
api_router.include_router(imports.router)
api_router.include_router(internal.router)
api_router.include_router(study.router)

__all__ = ["api_router"]
