"""
Structured JSON logging.

One JSON object per line. Every line carries the request's correlation id
(set by middleware, kept in a ContextVar) and any lead-tracing extras passed
through `extra=`: lead_id, submission_id, variant, phone, error_code.
Korean text (form labels, memo summaries) is written unescaped.
"""
import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

EXTRA_FIELDS = ("lead_id", "submission_id", "variant", "phone", "error_code")

QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx")


def get_correlation_id() -> Optional[str]:
    return correlation_id_ctx.get()


def set_correlation_id(cid: str) -> None:
    correlation_id_ctx.set(cid)


def generate_correlation_id() -> str:
    """32-char hex id for requests that arrive without X-Correlation-ID."""
    return uuid.uuid4().hex


class StructuredJsonFormatter(logging.Formatter):
    """Formats records as {"timestamp", "level", "correlation_id", "module", "message", ...extras}."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "correlation_id": get_correlation_id(),
            "module": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key)) for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_structured_logging(log_level: str = "INFO") -> None:
    """Install the JSON formatter on the root logger. Call once from the app factory."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class VariantLogger(logging.LoggerAdapter):
    """Stamps every record with the lead variant ("lead" or "c_lead") the webhook is processing."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("variant", self.extra["variant"])
        kwargs["extra"] = extra
        return msg, kwargs


def get_variant_logger(name: str, variant: str) -> VariantLogger:
    return VariantLogger(logging.getLogger(name), {"variant": variant})
