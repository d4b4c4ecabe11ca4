"""Application entrypoint that delegates to the app factory."""

from dear_diary.core.app_factory import create_app

app = create_app()
