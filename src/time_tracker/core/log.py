"""Logging setup shared by the server and the CLI."""

import logging
from pathlib import Path
from typing import Optional

from time_tracker.core.config import ConfigManager

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: ConfigManager, level: Optional[str] = None) -> None:
    """Configure the root logger from ``advanced.log_level``/``advanced.log_file``.

    Args:
        config: Configuration manager
        level: Overrides the configured level (e.g. from ``--verbose``)
    """
    log_level = getattr(logging, (level or config.get("advanced.log_level", "INFO")).upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_time_tracker", False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = config.get("advanced.log_file")
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler._time_tracker = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)
