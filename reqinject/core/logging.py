"""Structured logging via structlog.

Library modules log through the stdlib (`logging.getLogger(__name__)`);
whoever embeds the engine calls `configure_structlog()` once to choose how
those lines are rendered.

Renderer selection:
  debug=True  — `ConsoleRenderer` with colours for local runs.
  debug=False — `JSONRenderer` for machine-parseable CI logs.

ContextVar injection:
  While a plan entry runs, the target artifact path is bound to
  `_artifact_var` and added to every structlog event, so a failure can be
  traced back to the archive it hit.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import structlog

_artifact_var: ContextVar[str] = ContextVar("artifact", default="")


def get_artifact() -> str:
    """Return the artifact currently being patched, or empty string if none."""
    return _artifact_var.get()


@contextmanager
def bind_artifact(artifact: str) -> Iterator[None]:
    """Bind the artifact path for log lines emitted inside the block."""
    token = _artifact_var.set(artifact)
    try:
        yield
    finally:
        _artifact_var.reset(token)


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject the current artifact from its ContextVar."""
    artifact = get_artifact()
    if artifact:
        event_dict["artifact"] = artifact
    return event_dict


def configure_structlog(debug: bool = True) -> None:
    """Configure structlog and bridge stdlib logging into it.

    Safe to call more than once; the last call wins.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Route stdlib records from the engine modules through structlog's renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger("reqinject")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.propagate = False
