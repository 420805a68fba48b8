"""Log setup for the request form and the export path.

The form and the export driver emit structlog events (export_started,
export_saved, export_failed, signature_page_added, ...). SCHULWEG_LOG_LEVEL
picks the threshold and SCHULWEG_LOG_JSON=1 switches the console renderer to
JSON lines for server deployments.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import resolve_log_settings


def setup_logging(json_output: Optional[bool] = None, log_level: Optional[str] = None) -> None:
    """Configure structlog and the stdlib bridge.

    Arguments left as None are taken from SCHULWEG_LOG_JSON and
    SCHULWEG_LOG_LEVEL.
    """
    env_json, env_level = resolve_log_settings()
    json_output = env_json if json_output is None else json_output
    numeric_level = getattr(logging, (log_level or env_level).upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # fpdf2 logs through the stdlib; keep it on the same stream and threshold.
    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stdout)]
    root.setLevel(numeric_level)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
