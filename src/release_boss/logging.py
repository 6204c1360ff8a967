"""Structured logging for release-boss.

Configures `structlog <https://www.structlog.org/>`_ on top of the
standard library logger with two output modes:

- **Console** (default): human-readable, colored when stderr is a TTY.
- **JSON** (``--json-log``): one JSON object per line.

Logs go to stderr so stdout stays clean for command output and for
GitHub Actions workflow commands.

Usage::

    from release_boss.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
    log.info("bump determined", bump="minor", version="0.5.0")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

_SENSITIVE_ENV_VARS: tuple[str, ...] = ("GITHUB_TOKEN", "GH_TOKEN", "INPUT_TOKEN")
_REDACTED = "[REDACTED]"

_secret_values: frozenset[str] = frozenset()


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    json_log: bool = False,
) -> None:
    """Configure structlog for release-boss.

    Call once at startup, before any log calls. Calling again replaces the
    previous configuration.

    Args:
        verbose: Enable debug-level output
        quiet: Only show warnings and errors
        json_log: Render JSON lines instead of console output
    """
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    global _secret_values  # noqa: PLW0603
    _secret_values = _build_secret_values()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_sensitive_values,
    ]

    renderer: structlog.types.Processor
    if json_log:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = "release_boss") -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger."""
    return structlog.get_logger(name)


def _build_secret_values() -> frozenset[str]:
    return frozenset(v for name in _SENSITIVE_ENV_VARS if (v := os.environ.get(name, "")))


def _scrub(value: object) -> object:
    if not isinstance(value, str) or not _secret_values:
        return value
    for secret in _secret_values:
        if len(secret) >= 8 and secret in value:
            value = value.replace(secret, _REDACTED)
    return value


def redact_sensitive_values(
    logger: Any,  # noqa: ANN401
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor replacing token values with ``[REDACTED]``."""
    return {key: _scrub(value) for key, value in event_dict.items()}
