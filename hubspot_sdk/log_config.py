"""
Logging setup for scripts and applications using the HubSpot client.

The library itself only logs through `logging.getLogger(__name__)` and never
installs handlers. Call `configure_logging()` to render those records with
structlog, either as console output or as JSON lines on stderr.
"""

import logging
import sys

import structlog

LOGGER_NAME = "hubspot_sdk"


def configure_logging(verbose: bool = False, log_json: bool = False) -> logging.Handler:
    """
    Route hubspot_sdk log records through a structlog formatter.

    Args:
        verbose: Emit per-request DEBUG records; otherwise WARNING and above
            (retries, rate limit pressure)
        log_json: Render JSON lines instead of console output

    Returns:
        The installed handler, so callers can remove it again

    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    # Replace a handler from an earlier call instead of stacking duplicates
    for existing in list(logger.handlers):
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return handler
