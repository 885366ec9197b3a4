"""Entry point: python -m threadwarden

Loads configuration, configures logging and serves the ingestion API with
uvicorn. Invalid configuration exits with status 1.
"""

import sys

import uvicorn

from threadwarden.api.app import create_app
from threadwarden.config import ConfigurationError, get_settings
from threadwarden.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> int:
    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging(level="ERROR", format="console")
        logger.error("configuration_invalid", error=str(e))
        return 1

    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
    )
    logger.info(
        "threadwarden_starting",
        host=settings.api.host,
        port=settings.api.port,
        platform=settings.discord.backend,
        storage=settings.storage.backend,
    )

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.error("configuration_invalid", error=str(e))
        return 1

    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=log_config.level.lower(),
        access_log=settings.debug,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
