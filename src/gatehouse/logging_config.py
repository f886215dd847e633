"""Logging setup: readable lines in development, JSON records elsewhere."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from gatehouse.config import get_settings


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """Adds service name, version and level to every JSON record."""

    def __init__(self, *args: Any, service: str, version: str, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = service
        self._version = version

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = self._service
        log_record["version"] = self._version
        log_record["level"] = record.levelname


def setup_logging() -> None:
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)

    if settings.is_development:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    else:
        handler.setFormatter(ServiceJsonFormatter(
            "%(asctime)s %(level)s %(name)s %(message)s",
            service=settings.app_name,
            version=settings.app_version,
        ))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
