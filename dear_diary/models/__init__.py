"""Models package initialiser.

- Exposes the shared SQLAlchemy `Base`.
- Lazily exposes the domain models through `registry` so importing
  `dear_diary.core.database` (which pulls `Base`) doesn't import every model.
"""

from dear_diary.models.base import Base

__all__ = ["Base"]


def __getattr__(name: str):
    import importlib

    _registry = importlib.import_module("dear_diary.models.registry")

    if hasattr(_registry, name):
        return getattr(_registry, name)
    raise AttributeError(f"module 'dear_diary.models' has no attribute {name!r}")
