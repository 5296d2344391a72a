import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

# Correlation id of the request being served, set by CorrelationIdMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_FORMAT = "%(timestamp) %(level) %(name) %(message)"


class ServiceJsonFormatter(jsonlogger.JsonFormatter):
    """
    One JSON object per record, stamped with the service identity.

    Extras passed by callers (`code` for handled application errors,
    `duration_ms` from the request logger) land at the top level.
    """

    def __init__(self, *args, service: str = "", environment: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        if self.service:
            log_record["service"] = self.service
        if self.environment:
            log_record["environment"] = self.environment

        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id


def setup_logging(service: str = "", environment: str = "", level: str = "INFO") -> None:
    root = logging.getLogger()
    # The app module can be imported more than once under a test runner
    if any(isinstance(h.formatter, ServiceJsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(ServiceJsonFormatter(LOG_FORMAT, service=service, environment=environment))
    root.addHandler(handler)
    root.setLevel(level)

    # Suppress verbose logs from some libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
