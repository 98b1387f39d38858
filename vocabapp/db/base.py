import logging

from sqlalchemy import event
from sqlmodel import SQLModel, create_engine

from vocabapp.config.settings import get_settings

logger = logging.getLogger(__name__)

_engine = None


def get_engine():
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(database_url, echo=False, pool_pre_ping=True, connect_args=connect_args)
        if database_url.startswith("sqlite"):
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
        logger.info(f"Database engine created for {database_url.split('://', 1)[0]}")
    return _engine


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db() -> None:
    """Create all tables registered on the SQLModel metadata."""
    from vocabapp.db import schemas  # noqa: F401

    SQLModel.metadata.create_all(get_engine())
