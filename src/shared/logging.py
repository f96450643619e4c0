"""
Shared logging setup and request correlation IDs.

Every MCP server calls setup_logging once at import time so that all
agents write the same line format, and tags each tool invocation with
a correlation ID that also names its side-channel artifacts.
"""

import logging
import uuid

LOG_FORMAT = "%(asctime)s  %(name)-30s  %(levelname)-7s  %(message)s"


def setup_logging(agent_name: str, level: str = "INFO") -> logging.Logger:
    """
    Configure root logging and return the agent's logger.

    Args:
        agent_name: Name of the agent (used as logger name).
        level: Log level string (e.g. 'INFO', 'DEBUG'). Unknown names
            fall back to INFO.

    Returns:
        Configured logger instance.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    return logging.getLogger(agent_name)


def generate_correlation_id() -> str:
    """Generate a short unique ID for one tool invocation."""
    return uuid.uuid4().hex[:12]
