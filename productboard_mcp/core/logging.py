"""Structured logging for the Productboard tool server.

- Uses loguru.
- Injects `request_id` and `tool_name` through contextvars so plain
  `logger.info(...)` calls carry them automatically.
"""

from __future__ import annotations

import os
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping, Optional

from loguru import logger as _base_logger


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_tool_name: ContextVar[Optional[str]] = ContextVar("tool_name", default=None)

REDACTED = "[REDACTED]"
SENSITIVE_HEADERS = frozenset({"authorization", "x-api-token", "cookie"})


def _patch_record(record: dict) -> dict:
    record_extra = record.get("extra")
    if record_extra is None:
        record_extra = {}
        record["extra"] = record_extra

    record_extra.setdefault("request_id", _request_id.get())
    record_extra.setdefault("tool_name", _tool_name.get())
    return record


logger = _base_logger.patch(_patch_record)


def new_request_id() -> str:
    return uuid.uuid4().hex


def redact_headers(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Copy of `headers` safe to log: credentials are replaced, never echoed."""
    if not headers:
        return {}
    return {
        key: (REDACTED if key.lower() in SENSITIVE_HEADERS and value else value)
        for key, value in headers.items()
    }


@contextmanager
def log_context(
    *,
    request_id: Optional[str] = None,
    tool_name: Optional[str] = None,
) -> Iterator[None]:
    tokens = []
    if request_id is not None:
        tokens.append((_request_id, _request_id.set(request_id)))
    if tool_name is not None:
        tokens.append((_tool_name, _tool_name.set(tool_name)))

    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def setup_logging(
    *,
    level: str = "INFO",
    fmt: str = "json",
    debug: bool = False,
    log_dir: Optional[str] = None,
) -> None:
    """Configure sinks.

    Args:
        level: log level.
        fmt: 'json' or 'text'.
        debug: enable loguru backtrace/diagnose.
        log_dir: when set, also write a rotating file sink there.
    """
    logger.remove()

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    if fmt.lower() == "json":
        logger.add(
            sys.stdout,
            level=level.upper(),
            serialize=True,
            backtrace=debug,
            diagnose=debug,
        )
        if log_dir:
            logger.add(
                os.path.join(log_dir, "productboard-mcp.json.log"),
                level=level.upper(),
                serialize=True,
                rotation="10 MB",
                retention="7 days",
                compression="zip",
                backtrace=debug,
                diagnose=debug,
            )
        return

    # text format: ids only when present
    def format_message(record):
        parts = ["{time:YYYY-MM-DD HH:mm:ss}", "|", "{level:<8}", "|"]

        ids = []
        if record["extra"].get("request_id"):
            ids.append(f"req={record['extra']['request_id'][:8]}")
        if record["extra"].get("tool_name"):
            ids.append(f"tool={record['extra']['tool_name']}")

        if ids:
            parts.append(" " + " | ".join(ids) + " -")

        parts.append(" {name}:{function} -")
        parts.append(" {message}")
        return "".join(parts) + "\n"

    logger.add(
        sys.stdout,
        level=level.upper(),
        format=format_message,
        backtrace=debug,
        diagnose=debug,
    )
    if log_dir:
        logger.add(
            os.path.join(log_dir, "productboard-mcp.log"),
            level=level.upper(),
            format=format_message,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            backtrace=debug,
            diagnose=debug,
        )
