import logging
import sys
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
NO_CORRELATION_ID = "-"

# Context variable to store correlation ID across async boundaries
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default=NO_CORRELATION_ID)


class CorrelationIdFilter(logging.Filter):
    """Logging filter to add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get()
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that ensures correlation_id always exists."""

    def format(self, record):
        if not hasattr(record, "correlation_id"):
            record.correlation_id = NO_CORRELATION_ID
        return super().format(record)


def setup_logging(level: str = "INFO"):
    root = logging.getLogger()
    root.setLevel(level)

    # Replace handlers from a previous call (uvicorn reload, tests)
    for handler in list(root.handlers):
        if getattr(handler, "_crud_backend", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(SafeFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    handler._crud_backend = True
    root.addHandler(handler)

    # asyncpg logs every notice at INFO
    logging.getLogger("asyncpg").setLevel(logging.WARNING)

    logging.info("Logging is set up.")
