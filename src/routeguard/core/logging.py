"""Logging configuration."""

import json
import logging
import sys
from datetime import datetime
from typing import Any

from routeguard.config import Settings

AUTHORIZER_LOGGER = "routeguard.core.authorizer"
REGISTRY_LOGGER = "routeguard.core.registry"

# Attributes passed with ``extra=`` by authorization denials
AUDIT_FIELDS = ("token_id", "method", "path", "permission")


class JsonFormatter(logging.Formatter):
    """JSON log formatter, keeping the audit fields of authorization decisions."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        for field in AUDIT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def setup_logging(settings: Settings) -> None:
    """
    Configure logging based on settings.

    Authorization denials are logged at INFO by the authorizer and can be
    silenced with ``log_auth_denials``. Registry decisions (skipped routes,
    suffixed keys) are logged at DEBUG and only shown in debug mode.

    Args:
        settings: Application settings
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if settings.debug else settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    if settings.environment == "production":
        console_handler.setFormatter(JsonFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    root_logger.addHandler(console_handler)

    logging.getLogger(AUTHORIZER_LOGGER).setLevel(
        logging.INFO if settings.log_auth_denials else logging.WARNING
    )
    logging.getLogger(REGISTRY_LOGGER).setLevel(
        logging.DEBUG if settings.debug else logging.INFO
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )
