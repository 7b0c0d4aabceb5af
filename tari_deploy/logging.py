from __future__ import annotations

"""
Structured logging setup for tari-deploy.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Pipeline events are emitted with key/value context (stage, transaction_id, fee).
- A pretty console renderer is used by default; JSON is available for CI.
- Auth tokens handed out by the wallet daemon never reach the log output.

Quick start
-----------
    from tari_deploy.logging import setup_logging, get_logger

    setup_logging()  # call once on process start (the CLI does this)
    log = get_logger(__name__)
    log.info("fee_estimated", fee=1000)

Environment
-----------
- TARI_DEPLOY_LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: WARNING)
- TARI_DEPLOY_LOG_FORMAT: "console" (default) or "json"
"""

import logging
import os
import sys
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars

REDACT_KEYS = {"authorization", "token", "auth_token", "permissions_token", "password", "secret"}


def _redact_secrets(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    for k in list(event_dict.keys()):
        if k.lower() in REDACT_KEYS and event_dict[k] is not None:
            event_dict[k] = "***"
    return event_dict


def _base_processors() -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    yield _redact_secrets
    yield structlog.processors.UnicodeDecoder()


def setup_logging(
    *,
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once; the
    last call wins.

    Logs go to stderr so that command output on stdout stays clean.
    """
    env_level = os.getenv("TARI_DEPLOY_LOG_LEVEL", "").upper() or None
    env_format = os.getenv("TARI_DEPLOY_LOG_FORMAT", "").lower() or None

    level = level or env_level or "WARNING"
    if isinstance(level, str):
        level = level.upper()
    log_format = (log_format or env_format or "console").lower()

    processors = list(_base_processors())
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), sort_keys=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                *processors,
            ],
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)

    logging.getLogger("httpcore").setLevel(os.getenv("TARI_DEPLOY_LOG_LEVEL_HTTPCORE", "WARNING"))
    logging.getLogger("httpx").setLevel(os.getenv("TARI_DEPLOY_LOG_LEVEL_HTTPX", "WARNING"))


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger bound to ``name`` (usually the module name).
    """
    return structlog.get_logger(name)


def bind_deploy_context(**kv: Any) -> None:
    """
    Bind deployment-scoped key/value pairs (e.g. account, network) into the
    structlog contextvars store.
    """
    structlog.contextvars.bind_contextvars(**kv)


def clear_deploy_context(*keys: str) -> None:
    if keys:
        structlog.contextvars.unbind_contextvars(*keys)
    else:
        structlog.contextvars.clear_contextvars()


__all__ = [
    "setup_logging",
    "get_logger",
    "bind_deploy_context",
    "clear_deploy_context",
]
