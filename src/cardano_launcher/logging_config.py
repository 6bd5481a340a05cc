"""
Centralized logging configuration for the launcher.

Provides a single setup_logging function that configures logging with:
- Console output to stdout with a technical formatter
- Optional file output to {log_dir}/{service_name}.log
- Fresh log file on each start unless LOG_APPEND is true

and service_logger, which prefixes records with the supervised process name.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple, Union

from .config import env_bool

_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

_TECHNICAL_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Prefix every message with ``[name]``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['service']}] {msg}", kwargs


def service_logger(logger: LoggerLike, name: str) -> ServiceLoggerAdapter:
    """Return ``logger`` wrapped so its records are prefixed with ``name``."""
    base = logger.logger if isinstance(logger, logging.LoggerAdapter) else logger
    if isinstance(logger, ServiceLoggerAdapter):
        name = f"{logger.extra['service']}.{name}"
    return ServiceLoggerAdapter(base, {"service": name})


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(_TECHNICAL_FORMAT, _DATE_FORMAT)


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as exc:
            _MODULE_LOGGER.debug("Handler close failed: %s", exc)
    logger.handlers = []


def _configure_file_handler(service_name: Optional[str], log_dir: Optional[Path]) -> Optional[logging.Handler]:
    if not service_name:
        return None

    logs_dir = log_dir if log_dir is not None else Path.cwd() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    file_mode = "a" if env_bool("LOG_APPEND", False) else "w"

    handler_cls = getattr(logging.handlers, "WatchedFileHandler", logging.FileHandler)
    file_handler = handler_cls(logs_dir / f"{service_name}.log", mode=file_mode)
    file_handler.setFormatter(_build_formatter())
    file_handler.setLevel(logging.DEBUG)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def setup_logging(
    service_name: Optional[str] = None,
    *,
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
) -> None:
    """Configure the root logger, replacing handlers from earlier calls."""

    with _config_lock:
        root_logger = logging.getLogger()
        _close_handlers(root_logger)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(_build_formatter())
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

        file_handler = _configure_file_handler(service_name, log_dir)
        if file_handler:
            root_logger.addHandler(file_handler)

        root_logger.setLevel(min(level, file_handler.level) if file_handler else level)
        _suppress_noisy_third_parties()


__all__ = ["ServiceLoggerAdapter", "service_logger", "setup_logging"]
