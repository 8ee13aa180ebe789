"""FastAPI application factory. No business logic; only wiring and the request pipeline.

Run with ``python -m app.serve`` or ``uvicorn app.main:create_app --factory``.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from fastapi import FastAPI

from app.api.fallback import router as fallback_router
from app.core.config import Settings, get_host_settings, resolve_settings
from app.core.debugger import is_debugger_attached
from app.middleware.handlers import HttpsRedirectHandler, StaticFileHandler
from app.middleware.pipeline import RequestPipelineMiddleware

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    static_dir: str | Path | None = None,
    index_document: str | None = None,
    debugger_probe: Callable[[], bool] = is_debugger_attached,
) -> FastAPI:
    """
    Build the host: HTTPS check -> static files -> SPA fallback route.

    Missing arguments come from HostSettings. Raises ConfigLoadError when the
    settings cannot be resolved and FileNotFoundError when the index document
    does not exist.
    """
    host_settings = get_host_settings()
    if settings is None:
        settings = resolve_settings(
            host_settings.APP_SETTINGS_FILE,
            environment=host_settings.APP_ENV,
            env_prefix=host_settings.CONFIG_ENV_PREFIX,
        )
    static_root = Path(static_dir if static_dir is not None else host_settings.STATIC_DIR)
    index_path = static_root / (index_document or host_settings.INDEX_DOCUMENT)
    if not index_path.is_file():
        raise FileNotFoundError(f"SPA index document not found: {index_path}")

    app = FastAPI(
        title="SPA Host",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Container: the resolved settings and the root document, shared read-only.
    app.state.settings = settings
    app.state.index_document = index_path.resolve()

    app.add_middleware(
        RequestPipelineMiddleware,
        handlers=[
            HttpsRedirectHandler(settings, debugger_probe),
            StaticFileHandler(static_root),
        ],
    )
    app.include_router(fallback_router)

    logger.info(
        "Application built",
        extra={"static_dir": str(static_root), "index_document": str(index_path)},
    )
    return app
