# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_jwt_bearer

import logging
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from opentelemetry import trace

from coreason_jwt_bearer.config import LogSettings

__all__ = ["logger", "configure_logging"]

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging messages to Loguru.
    Ensures libraries using standard logging (httpx, authlib) are captured uniformly.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno  # type: ignore[assignment]

        # Find caller from where originated the logged message
        frame = logging.currentframe()
        depth = 2
        while frame and (frame.f_code.co_filename == logging.__file__ or frame.f_code.co_filename == __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Injects OpenTelemetry trace_id and span_id into the log record.
    Used as a patcher for Loguru.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")
        record["extra"]["correlation_id"] = format(ctx.trace_id, "032x")


def _add_file_sink(path: str, level: str) -> None:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            rotation="500 MB",
            retention="10 days",
            serialize=True,
            enqueue=True,
            level=level,
        )
    except (PermissionError, OSError):
        # Read-only filesystem; console logging still applies
        pass


def configure_logging(settings: LogSettings | None = None) -> None:
    """
    Configures the logger from `LogSettings` (`COREASON_LOG_*` environment variables).
    Call this to reload configuration if env vars change.
    """
    settings = settings or LogSettings()
    log_level = settings.level

    try:
        logger.level(log_level)
    except ValueError:
        log_level = "INFO"

    # Drop every previously added handler and install the patcher in one go
    logger.configure(handlers=[], patcher=trace_id_injector)

    if settings.serialize:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=TEXT_FORMAT)

    if settings.file:
        _add_file_sink(settings.file, log_level)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    numeric_level = logging.getLevelName(log_level)
    if isinstance(numeric_level, int):
        logging.getLogger().setLevel(numeric_level)
    else:
        # Custom loguru levels (e.g. SUCCESS) have no stdlib counterpart
        logging.getLogger().setLevel(logging.INFO)


# Initialize on import
configure_logging()
