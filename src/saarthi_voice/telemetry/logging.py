"""Console logging setup for the CLI."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_EXTRA_SKIP = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class _ExtraFormatter(logging.Formatter):
    """Appends structured ``extra={...}`` fields to the event name."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = {key: value for key, value in vars(record).items() if key not in _EXTRA_SKIP}
        if not extras:
            return message
        rendered = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
        return f"{message} {rendered}"


def configure_logging(level: str = "INFO") -> None:
    """Route ``saarthi_voice`` loggers through a rich console handler."""
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(_ExtraFormatter("%(message)s"))

    logger = logging.getLogger("saarthi_voice")
    logger.handlers = [handler]
    logger.setLevel(level.upper())
    logger.propagate = False
