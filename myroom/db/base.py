"""SQLAlchemy Base class for all models."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def import_models():
    """Import all models so they are registered on Base.metadata."""
    from myroom.models import listing, review  # noqa: F401
