from myroom.db.base import Base
from myroom.db.session import SessionLocal, engine

__all__ = ["Base", "SessionLocal", "engine"]
