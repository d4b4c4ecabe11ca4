# run_migrations.py
from pathlib import Path

from alembic import command
from alembic.config import Config

if __name__ == "__main__":
    alembic_cfg = Config(str(Path(__file__).resolve().parent / "alembic.ini"))
    command.upgrade(alembic_cfg, "head")
