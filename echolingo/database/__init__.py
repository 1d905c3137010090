"""SQLAlchemy database layer for echolingo.

Provides the engine factory, session scope and declarative base used by the
SQL-backed lexicon store.
"""

from .base import Base
from .engine import create_lexicon_engine, create_session_factory, session_scope

__all__ = ["Base", "create_lexicon_engine", "create_session_factory", "session_scope"]
