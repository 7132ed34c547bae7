"""Database base configuration.

The layout service only reads submissions, so one engine per process and
short-lived sessions are enough.
"""

import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


def normalize_database_url(url: str) -> str:
    """SQLAlchemy needs the postgresql:// scheme that hosting providers often omit."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Engine for a database URL.

    SQLite is opened for use from FastAPI's threadpool; an in-memory
    SQLite database is pinned to one connection so every session sees it.
    """
    url = normalize_database_url(url)

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        echo=echo,
    )


DATABASE_URL = normalize_database_url(
    os.getenv("DATABASE_URL", "sqlite:///./gallery_layout.db")
)

engine = create_db_engine(
    DATABASE_URL,
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session for FastAPI dependencies."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create the submissions table where the platform has not already."""
    Base.metadata.create_all(bind=bind or engine)
