"""structlog logging setup for the CSP service."""

import logging
import re
import sys

import structlog

_REDACTED = "[redacted]"

# nonce-source inside a rendered policy or source list
_NONCE_SOURCE_RE = re.compile(r"'nonce-[^']*'")


def _redact_nonce(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Mask nonces, both as a `nonce` field and as 'nonce-...' inside string values."""
    for key, value in event_dict.items():
        if key == "nonce" and value:
            event_dict[key] = _REDACTED
        elif isinstance(value, str) and "'nonce-" in value:
            event_dict[key] = _NONCE_SOURCE_RE.sub(f"'nonce-{_REDACTED}'", value)
    return event_dict


def setup_logging(log_level: str = "info", json_format: bool = True) -> None:
    """Configure structlog for JSON or human-readable output on stdout."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _redact_nonce,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
