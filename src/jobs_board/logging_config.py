"""Structured logging configuration using structlog.

JSON lines in production, colored console output in development. Workflow
logs carry `workflow` and `job_id` as bound context so a multi-step
transaction can be followed from the first submission to the refresh.

Poster tokens and private keys are bearer secrets; any event field with
one of their names is masked before rendering.

Usage:
    from jobs_board.logging_config import setup_logging, get_logger
    setup_logging(log_level="INFO", json_logs=False)
    logger = get_logger(__name__)
    logger.info("workflow.step_confirmed", step="APPROVE", tx_hash="0x...")
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog

SECRET_FIELDS = frozenset({"poster_token", "token", "x_token", "private_key", "signer_private_key"})

# web3 logs every provider request at DEBUG, sqlalchemy every statement
NOISY_LOGGERS = (
    "uvicorn.access",
    "sqlalchemy.engine",
    "httpx",
    "httpcore",
    "web3.providers",
    "web3.RequestManager",
    "web3.manager",
    "aiosqlite",
)


def redact_secrets(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """structlog processor: mask secret-bearing fields."""
    for key in list(event_dict):
        if key.lower().replace("-", "_") in SECRET_FIELDS and event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Standard level name (DEBUG, INFO, WARNING, ...).
        json_logs: Render JSON lines instead of the colored console format.
        stream: Where log lines go. The CLI passes stderr so command
            output on stdout stays machine readable.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream is None or stream.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger; pass the module's __name__."""
    return structlog.get_logger(name)
