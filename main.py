"""Process entry point: serve the Mutuals+ API with uvicorn."""

import os

import uvicorn
from loguru import logger

from mutuals.api.main import app
from mutuals.core.config import get_settings
from mutuals.core.logging import setup_logging

# uvicorn's own loggers are routed through loguru
UVICORN_LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "default": {"class": "mutuals.core.logging.InterceptHandler"},
    },
    "loggers": {
        name: {"handlers": ["default"], "level": "INFO", "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    },
}


def main() -> None:
    settings = get_settings()
    setup_logging(settings)

    # Container platforms pass the listening port in PORT
    port = int(os.environ.get("PORT", settings.api_port))

    if settings.debug:
        logger.info(
            "Starting Uvicorn on http://{}:{} (development mode with auto-reload)",
            settings.api_host,
            port,
        )
        # Reload needs the app as an import string
        uvicorn.run(
            "mutuals.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_config=UVICORN_LOG_CONFIG,
        )
    else:
        logger.info(
            "Starting Uvicorn on http://{}:{} ({})",
            settings.api_host,
            port,
            settings.environment,
        )
        uvicorn.run(
            app,
            host=settings.api_host,
            port=port,
            log_config=UVICORN_LOG_CONFIG,
        )


if __name__ == "__main__":
    main()
