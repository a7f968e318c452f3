"""Database utilities - engine and session."""

from src.carledger.core.db.engine import dispose_engine, get_engine
from src.carledger.core.db.session import get_session

__all__ = [
    # Engine
    "dispose_engine",
    "get_engine",
    # Session
    "get_session",
]
