import logging
import os
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from zivid_samples.core.config import SampleSettings
from zivid_samples.core.utils import ifnone

ROOT_LOGGER_NAME = "zivid_samples"


def default_formatter(fmt: Optional[str] = None) -> logging.Formatter:
    """Returns a logging formatter with a default format if none is specified."""
    default_fmt = "[%(asctime)s] %(levelname)s: %(name)s: %(message)s"
    return logging.Formatter(fmt or default_fmt)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    *,
    log_dir: Optional[Path] = None,
    logger_level: int = logging.DEBUG,
    stream_level: int = logging.ERROR,
    add_stream_handler: bool = True,
    file_level: int = logging.DEBUG,
    file_mode: str = "a",
    add_file_handler: bool = True,
    propagate: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    use_structlog: Optional[bool] = None,
    structlog_json: Optional[bool] = None,
) -> Logger | structlog.stdlib.BoundLogger:
    """Configure and initialize logging for zivid_samples components.

    Sets up a rotating file handler and a console handler on the given logger. The log file defaults to
    ``<LOGGER_DIR>/zivid_samples.log`` for the root logger and ``<LOGGER_DIR>/modules/<name>.log`` for child loggers.

    Args:
        name: Logger name, defaults to "zivid_samples".
        log_dir: Custom directory for log file.
        logger_level: Overall logger level.
        stream_level: StreamHandler level (e.g., ERROR).
        add_stream_handler: Whether to add a stream handler.
        file_level: FileHandler level (e.g., DEBUG).
        file_mode: Mode for file handler, default is 'a' (append).
        add_file_handler: Whether to add a file handler.
        propagate: Whether the logger should propagate messages to ancestor loggers.
        max_bytes: Maximum size in bytes before rotating log file.
        backup_count: Number of backup files to retain.
        use_structlog: If True, configure and return a structlog BoundLogger. Defaults to the configured value.
        structlog_json: If True, render JSON; otherwise use the console renderer. Defaults to the configured value.

    Returns:
        Logger | structlog.stdlib.BoundLogger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(logger_level)
    logger.propagate = propagate

    default_config = SampleSettings()
    use_structlog = ifnone(use_structlog, default_config.ZIVID_SAMPLES_LOGGER.USE_STRUCTLOG)
    structlog_json = ifnone(structlog_json, default_config.ZIVID_SAMPLES_LOGGER.STRUCTLOG_JSON)

    if name == ROOT_LOGGER_NAME:
        child_log_path = f"{name}.log"
    else:
        child_log_path = os.path.join("modules", f"{name}.log")

    if log_dir:
        log_file_path = os.path.join(log_dir, child_log_path)
    elif use_structlog:
        log_file_path = os.path.join(default_config.ZIVID_SAMPLES_DIR_PATHS.STRUCT_LOGGER_DIR, child_log_path)
    else:
        log_file_path = os.path.join(default_config.ZIVID_SAMPLES_DIR_PATHS.LOGGER_DIR, child_log_path)

    if add_file_handler:
        os.makedirs(Path(log_file_path).parent, exist_ok=True)

    # structlog renders the whole record itself, so its handlers only print the message
    formatter = logging.Formatter("%(message)s") if use_structlog else default_formatter()

    if add_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(stream_level)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if add_file_handler:
        file_handler = RotatingFileHandler(
            filename=str(log_file_path), maxBytes=max_bytes, backupCount=backup_count, mode=file_mode
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not use_structlog:
        return logger

    renderer = structlog.processors.JSONRenderer() if structlog_json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def get_logger(
    name: str | None = ROOT_LOGGER_NAME, use_structlog: bool | None = None, **kwargs
) -> Logger | structlog.stdlib.BoundLogger:
    """
    Create or retrieve a named logger instance.

    Names that are not already namespaced get the ``zivid_samples.`` prefix, so every logger in the package hangs off
    the same root and propagates to it by default.

    Args:
        name (str): The name of the logger. Defaults to "zivid_samples".
        use_structlog (bool): Whether to use structured logging. If None, uses config default.
        **kwargs: Additional keyword arguments to be passed to `setup_logger`.

    Returns:
        logging.Logger | structlog.stdlib.BoundLogger: A configured logger instance.

    Example:
        .. code-block:: python

            from zivid_samples.core.logger import get_logger

            logger = get_logger("halcon.object_model")
            logger.info("Logger configured with custom settings.")
    """
    if not name:
        name = ROOT_LOGGER_NAME

    full_name = name if name.startswith(ROOT_LOGGER_NAME) else f"{ROOT_LOGGER_NAME}.{name}"
    kwargs.setdefault("propagate", True)
    # Child loggers hand console output to the root logger
    kwargs.setdefault("add_stream_handler", not kwargs["propagate"] or full_name == ROOT_LOGGER_NAME)
    return setup_logger(full_name, use_structlog=use_structlog, **kwargs)
