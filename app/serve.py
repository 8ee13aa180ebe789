"""
Process entrypoint for the SPA host. Run from the project root:

  python -m app.serve

Exits non-zero without binding a port when the settings cannot be resolved.
"""

import logging
import sys

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from app.core.config import (
    ConfigLoadError,
    LoggingSettings,
    get_host_settings,
    resolve_settings,
)
from app.core.logging import configure_logging
from app.main import create_app

logger = logging.getLogger(__name__)


def main() -> int:
    """Resolve settings, configure logging, build the app and serve it."""
    # Until the Logging section is known, report startup problems at INFO.
    configure_logging(LoggingSettings())

    host_settings = get_host_settings()
    try:
        settings = resolve_settings(
            host_settings.APP_SETTINGS_FILE,
            environment=host_settings.APP_ENV,
            env_prefix=host_settings.CONFIG_ENV_PREFIX,
        )
    except ConfigLoadError as e:
        logger.error("Configuration load failed (%s): %s", e.source, e.message)
        return 1

    configure_logging(settings.logging)

    try:
        application = create_app(settings)
    except (FileNotFoundError, RuntimeError) as e:
        # RuntimeError: Starlette StaticFiles rejects a missing static directory.
        logger.error("Application startup failed: %s", e)
        return 1

    uvicorn.run(
        application,
        host=host_settings.HOST,
        port=host_settings.PORT,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
