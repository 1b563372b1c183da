from __future__ import annotations

import logging
import sys

from core.config import get_settings


class KVFormatter(logging.Formatter):
    """Formatter that appends common extra fields if present.

    Keeps classic human-readable format while surfacing structured context.
    """

    keys = (
        "event",
        "method",
        "path",
        "status",
        "order_id",
        "payout_id",
        "report_id",
        "post_id",
        "comment_id",
        "parent_id",
        "service_id",
        "kind",
        "count",
        "rejected_count",
        "page",
        "took_ms",
        "error",
    )

    # Rendered with repr() so free text stays on one line
    quoted = frozenset({"error"})

    def context(self, record: logging.LogRecord) -> dict[str, object]:
        """Known extra fields of the record, in `keys` order, without None values."""
        values = {k: getattr(record, k, None) for k in self.keys}
        return {k: v for k, v in values.items() if v is not None}

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        ctx = self.context(record)
        if not ctx:
            return base
        rendered = " ".join(
            f"{k}={v!r}" if k in self.quoted else f"{k}={v}" for k, v in ctx.items()
        )
        return f"{base} | {rendered}"


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Send all panel logs to stdout through KVFormatter.

    Repeated calls (tests, uvicorn reload) replace the handler instead of
    stacking a new one.
    """
    root = logging.getLogger()
    root.setLevel(level if level is not None else get_settings().log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(KVFormatter(LOG_FORMAT))
    root.handlers = [handler]

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
