"""
Logging setup for the Autosuggest service.

Everything logs through the ``autosuggest`` logger hierarchy; modules do:
    import logging
    logger = logging.getLogger(__name__)
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from autosuggest.config.settings import LoggingSettings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    log_dir: Path | None = None,
    settings: Optional[LoggingSettings] = None,
    level: int | str | None = None,
    force: bool = False,
) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the
    ``autosuggest`` logger.

    Args:
        log_dir: Directory for the log file. None means console only.
        settings: Logging tunables; defaults to ``LoggingSettings()``.
        level: Overrides ``settings.level`` when given.
        force: Drop previously installed handlers first (used by tests and
            by the server when re-configured).

    Returns:
        The configured ``autosuggest`` logger.
    """
    settings = settings or LoggingSettings()
    resolved = _resolve_level(level if level is not None else settings.level)

    app_logger = logging.getLogger("autosuggest")
    app_logger.setLevel(resolved)

    if force:
        for handler in list(app_logger.handlers):
            app_logger.removeHandler(handler)
            handler.close()
    elif app_logger.handlers:
        # Already configured; only the level is refreshed
        return app_logger

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    app_logger.addHandler(console)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / settings.log_file,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(resolved)
            file_handler.setFormatter(formatter)
            app_logger.addHandler(file_handler)
        except OSError as e:
            app_logger.warning("Could not set up file logging: %s", e)

    return app_logger
