"""Core database access helpers.

Re-exports the shared declarative `Base` plus the engine, session factory and the
`get_db` dependency from `dear_diary.core.database.session`.
"""

from dear_diary.models.base import Base

from .session import SessionLocal, build_engine, engine, get_db

__all__ = ["Base", "SessionLocal", "engine", "get_db", "build_engine"]
