"""Logging setup and per-dispatch log context.

Modules log through stdlib ``logging.getLogger(__name__)``. ``setup_logging``
routes those records through structlog so every line carries a ``run_id``
(one per CLI invocation or webhook event) plus, while an action is being
dispatched, its ``domain``, ``action_type`` and ``user``.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

_run_id: ContextVar[str] = ContextVar("issueops_run_id", default="")


def current_run_id() -> str:
    return _run_id.get()


def start_run(run_id: str | None = None) -> str:
    """Begin a new correlated run; returns its id."""
    rid = run_id or uuid.uuid4().hex[:12]
    _run_id.set(rid)
    return rid


@contextmanager
def dispatch_log_context(domain: str, action_type: str, user: str) -> Iterator[None]:
    """Attach the action being dispatched to every log line in the block."""
    with structlog.contextvars.bound_contextvars(
        domain=domain, action_type=action_type, user=user,
    ):
        yield


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    rid = _run_id.get()
    if rid:
        event_dict["run_id"] = rid
    return event_dict


def setup_logging(level: str = "INFO", format: str = "console") -> None:
    """Install a single stderr handler rendering through structlog.

    Args:
        level: Root log level name; unknown names fall back to INFO.
        format: ``"json"`` for one JSON object per line (CI logs),
            anything else for the coloured console renderer.
    """
    chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if format == "json":
        render: Any = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        render = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            render,
        ],
    ))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
