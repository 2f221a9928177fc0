from sqlmodel import create_engine, SQLModel, Session
import logging

from portfolio_api.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL


def build_engine(database_url: str):
    """
    Create the engine for the configured backend.

    SQLite (default, single file) and PostgreSQL are both supported; the
    stores only speak SQLModel so switching is a DATABASE_URL change.
    """
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=300,  # Hosted Postgres drops idle connections
        pool_timeout=30,
    )


engine = build_engine(DATABASE_URL)


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    # Register table models on the metadata
    from portfolio_api import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured")
