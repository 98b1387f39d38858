import hmac
from collections.abc import Generator
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlmodel import Session

from vocabapp.config.settings import Settings, get_settings
from vocabapp.core.exceptions import AuthenticationError
from vocabapp.db.base import get_engine


def get_session() -> Generator[Session, None, None]:
    """Provide a database session for request scope."""
    engine = get_engine()
    with Session(engine) as session:
        yield session


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> int:
    """Identity of the caller, as verified and forwarded by the auth gateway."""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise AuthenticationError("Unauthorized")
    return int(x_user_id.strip())


def verify_worker_secret(
    x_worker_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    configured = settings.import_worker_secret
    if not configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Worker secret is not configured",
        )
    if not x_worker_secret or not hmac.compare_digest(x_worker_secret, configured):
        raise AuthenticationError("Unauthorized")
