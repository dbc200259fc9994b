"""Logging setup for the pricing engine.

Logs go to stderr; the CLI writes the quote itself to stdout.  Records may
carry quote context (``quote_file``, ``rates_version``) passed through
``extra=``; both formatters surface it when present.
"""

import json
import logging
import sys
from datetime import datetime, timezone

QUOTE_CONTEXT_FIELDS = ("quote_file", "rates_version")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def quote_context(record: logging.LogRecord) -> dict:
    """The quote context attached to a record, in field order."""
    return {
        key: getattr(record, key)
        for key in QUOTE_CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class QuoteTextFormatter(logging.Formatter):
    """Plain log lines with any quote context appended as ``key=value``."""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        line = super().format(record)
        context = quote_context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per log line, quote context as top-level keys."""

    def format(self, record):
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(quote_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "WARNING", json_output: bool = False) -> logging.Handler:
    """Replace the root handlers with one stderr handler and return it.

    Unknown level names fall back to WARNING.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else QuoteTextFormatter())
    root.handlers = [handler]
    return handler
