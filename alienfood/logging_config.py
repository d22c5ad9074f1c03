"""
Logging for the push subsystem.

structlog events are rendered through the stdlib root handler, so uvicorn,
httpx and our own modules share one output format. Push endpoints and key
material are capability URLs and secrets; the ``redact_push_secrets``
processor keeps them out of log lines.

Environment:
    ALIENFOOD_LOG_LEVEL   DEBUG/INFO/WARNING/... (default INFO)
    ALIENFOOD_LOG_FORMAT  "json" for one JSON object per line, else console

Usage:
    from alienfood.logging_config import get_logger, setup_logging
    setup_logging()
    logger = get_logger(__name__)
"""

import hashlib
import logging
import os
import sys

import structlog


SECRET_FIELDS = frozenset({"p256dh", "auth", "private_key", "admin_secret", "adminSecret"})

# Loggers owned by libraries we call; their INFO lines repeat what we already log
NOISY_LOGGERS = {"httpx": logging.WARNING, "httpcore": logging.WARNING}

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def endpoint_fingerprint(endpoint: str) -> str:
    """Return a short, stable fingerprint of a push endpoint for log lines."""
    return hashlib.sha256(endpoint.encode("utf-8")).hexdigest()[:12]


def redact_push_secrets(logger, method_name, event_dict):
    """Fingerprint raw endpoint URLs and mask key material in an event."""
    endpoint = event_dict.get("endpoint")
    if isinstance(endpoint, str) and "://" in endpoint:
        event_dict["endpoint"] = endpoint_fingerprint(endpoint)

    for field in SECRET_FIELDS.intersection(event_dict):
        event_dict[field] = "***"

    return event_dict


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    level = level or os.environ.get("ALIENFOOD_LOG_LEVEL", "INFO")
    if json_output is None:
        json_output = os.environ.get("ALIENFOOD_LOG_FORMAT", "").lower() == "json"

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_push_secrets,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            # Applied to records from plain stdlib loggers (uvicorn, httpx)
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["endpoint_fingerprint", "get_logger", "redact_push_secrets", "setup_logging"]
