"""Dear Diary forum service package."""

from dear_diary.core.config import Settings, settings
from dear_diary.core.database import Base, SessionLocal, engine, get_db

__all__ = [
    "settings",
    "Settings",
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
]
