import logging
import os
import sys

import structlog

from cloudstack_client.config.platform_dirs import get_logs_location
from cloudstack_client.config.settings import settings

_configured = False

SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def build_handlers(log_destination: str, log_dir: str, log_filename: str):
    """
    Create the stdlib handlers for a log destination.

    ``stderr`` keeps stdout free for command output; ``file`` writes JSON lines
    to ``log_dir/log_filename``; ``both`` does both.
    """
    handlers = []
    if log_destination in ("file", "both"):
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename), encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=SHARED_PROCESSORS,
            )
        )
        handlers.append(file_handler)

    if log_destination in ("stderr", "both"):
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(colors=False),
                foreign_pre_chain=SHARED_PROCESSORS,
            )
        )
        handlers.append(stream_handler)
    return handlers


def setup_logging(
    name: str = "cloudstack_client",
    log_dir: str = None,
    log_filename: str = None,
    log_level: str = None,
    log_destination: str = None,
):
    """
    Set up structured logging for the application using structlog.

    Handlers are installed on the first call only; later calls just return a
    named logger.

    :param name: Logger name, usually the calling module's ``__name__``.
    :param log_dir: Directory where the log file will be stored.
    :param log_filename: Name of the log file.
    :param log_level: Logging level (e.g., DEBUG, INFO, WARNING, ERROR, CRITICAL).
    :param log_destination: Where to send logs ("stderr", "file", or "both").
    :return: Configured structlog logger instance.
    """
    global _configured
    if _configured:
        return structlog.get_logger(name)

    log_dir = log_dir or settings.get("LOG_DIR") or str(get_logs_location())
    log_filename = log_filename or settings.get("LOG_FILENAME", "cloudstack_client.log")
    log_level = log_level or settings.get("LOG_LEVEL", "INFO")
    log_destination = log_destination or settings.get("LOG_DESTINATION", "stderr")

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + SHARED_PROCESSORS
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger("cloudstack_client")
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
    for handler in build_handlers(log_destination, log_dir, log_filename):
        root_logger.addHandler(handler)

    _configured = True
    return structlog.get_logger(name)
