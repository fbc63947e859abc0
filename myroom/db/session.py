"""Database session management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from myroom.config.settings import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine with pool arguments suited to the backend."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_OVERFLOW,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

