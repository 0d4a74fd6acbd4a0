"""Logging for the agent coordination core.

One package logger, configured from a CLI flag or the
AGENT_COORDINATION_LOG_LEVEL environment variable. Every record carries
the id of the workflow it was emitted under (``-`` outside a workflow), so
the lines of concurrent API requests can be told apart.
"""

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

PACKAGE_LOGGER = "agent_coordination"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(workflow_id)s] %(message)s"

_current_workflow: ContextVar[str | None] = ContextVar("current_workflow", default=None)


class WorkflowIdFilter(logging.Filter):
    """Stamp ``workflow_id`` on every record that passes the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.workflow_id = _current_workflow.get() or "-"
        return True


@contextmanager
def workflow_context(workflow_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``workflow_id``."""
    token = _current_workflow.set(workflow_id)
    try:
        yield
    finally:
        _current_workflow.reset(token)


def current_workflow_id() -> str | None:
    return _current_workflow.get()


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name. Falls back to AGENT_COORDINATION_LOG_LEVEL,
            then WARNING.

    Returns:
        The ``agent_coordination`` logger.
    """
    resolved_level = (
        level
        or os.environ.get("AGENT_COORDINATION_LOG_LEVEL")
        or "WARNING"
    ).upper()

    numeric_level = logging.getLevelName(resolved_level)
    if not isinstance(numeric_level, int):
        print(f"Warning: Invalid log level '{resolved_level}', using WARNING", file=sys.stderr)
        numeric_level = logging.WARNING

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    # reconfiguring only updates levels
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.addFilter(WorkflowIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
