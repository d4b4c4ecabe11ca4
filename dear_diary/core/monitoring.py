"""Prometheus monitoring configuration with duplicate-registration guard.

Instrumentation is guarded to avoid duplicate registry errors when multiple
app instances are created in tests or interactive sessions.
"""

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

_metrics_configured = False


def setup_monitoring(app: FastAPI) -> None:
    """Attach Prometheus instrumentation once per process and expose `/metrics`."""
    global _metrics_configured
    if _metrics_configured or getattr(app.state, "metrics_enabled", False):
        return

    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics", "/livez", "/readyz", "/docs", "/openapi.json"],
        env_var_name="ENABLE_METRICS",
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, include_in_schema=False)

    app.state.metrics_enabled = True
    _metrics_configured = True
