from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base
import logging

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine described by the settings.

    SQLite engines are shared across worker threads, so the same-thread
    check is turned off and pool sizing is left to SQLAlchemy.
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.DB_ECHO
        )
    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=settings.DB_ECHO
    )


def init_db(engine: Engine, reset: bool = False) -> None:
    """
    Create all tables.

    With reset=True the schema is dropped first, which wipes every account.
    Only meant for local development.
    """
    # Import models to ensure they are registered with Base
    from .models import Account  # noqa: F401

    if reset:
        logger.warning("Dropping all tables before recreating the schema")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    tables = inspect(engine).get_table_names()
    logger.info("Database initialized, tables=%s", ",".join(sorted(tables)))
