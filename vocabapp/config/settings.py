from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Vocabulary Learning Service"
    database_url: str = "sqlite:///./app.db"
    log_level: str = "INFO"

    # Shared secret for the internal batch trigger; unset disables the route.
    import_worker_secret: Optional[str] = Field(
        default=None, validation_alias="VOCAB_IMPORT_WORKER_SECRET"
    )
    import_batch_size: int = 10
    study_queue_default_limit: int = 20

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
