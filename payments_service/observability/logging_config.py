"""
Structured logging configuration.

structlog builds the event dict (context vars, logger name, level) and hands
it to stdlib logging as ``extra`` fields; a python-json-logger formatter on
the root handler renders one JSON object per line with trace correlation.
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import structlog
from opentelemetry import trace
from pythonjsonlogger import jsonlogger

from ..config import Settings, get_settings

SENSITIVE_KEYS = frozenset({"card_number", "cvv", "password", "api_key", "secret"})

_HANDLER_FLAG = "_payments_service_handler"


def _mask(value: Any) -> str:
    if isinstance(value, str) and len(value) > 4:
        return f"***{value[-4:]}"
    return "***REDACTED***"


def scrub_sensitive_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``data`` with sensitive values masked.

    Nested mappings are scrubbed too. The input is never modified, since
    logged payloads are often the live records held by the store.
    """
    scrubbed: Dict[str, Any] = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            scrubbed[key] = _mask(value)
        elif isinstance(value, Mapping):
            scrubbed[key] = scrub_sensitive_data(value)
        else:
            scrubbed[key] = value
    return scrubbed


class CorrelationJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that injects trace_id/span_id and masks sensitive fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        span = trace.get_current_span()
        ctx = span.get_span_context()
        if ctx.is_valid:
            log_record["trace_id"] = format(ctx.trace_id, "032x")
            log_record["span_id"] = format(ctx.span_id, "016x")

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()

        scrubbed = scrub_sensitive_data(log_record)
        log_record.clear()
        log_record.update(scrubbed)


class AppContextProcessor:
    """
    Add application name and environment to every event.

    One shared instance is updated by ``setup_logging``, so loggers cached
    under an earlier configuration report the current settings.
    """

    def __init__(self) -> None:
        self.app_name: Optional[str] = None
        self.app_env: Optional[str] = None

    def configure(self, settings: Settings) -> None:
        self.app_name = settings.app_name
        self.app_env = settings.app_env

    def __call__(self, logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        if self.app_name is not None:
            event_dict.setdefault("app_name", self.app_name)
            event_dict.setdefault("app_env", self.app_env)
        return event_dict


add_app_context = AppContextProcessor()


def build_formatter() -> CorrelationJsonFormatter:
    return CorrelationJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(message)s",
        rename_fields={"message": "event"},
    )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structured JSON logging for the application.

    Safe to call more than once: the handler installed by a previous call is
    replaced, handlers installed by others (pytest, uvicorn) are left alone.

    Example output:
        {"event": "payment_processed", "level": "INFO", "logger": "payments_service.payments.service",
         "timestamp": "2025-01-06T10:00:00+00:00", "trace_id": "4bf9...", "span_id": "00f0...",
         "payment": {"id": "pay_1736157600000", "orderId": "ord_1", "amount": 100}}
    """
    settings = settings or get_settings()
    level = settings.log_level
    add_app_context.configure(settings)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            add_app_context,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    for handler in root_logger.handlers[:]:
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)

    json_handler = logging.StreamHandler(sys.stdout)
    json_handler.setFormatter(build_formatter())
    setattr(json_handler, _HANDLER_FLAG, True)
    root_logger.addHandler(json_handler)

    # Access logs come from our middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=level,
        app_env=settings.app_env,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        Any: Structured logger
    """
    return structlog.get_logger(name)
