import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from pythonjsonlogger import jsonlogger

from outreach.metrics import record_http_request


request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(ts)s %(level)s %(name)s %(message)s"

# Loggers owned by uvicorn that must share the JSON handler
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Paths left out of the request log and HTTP metrics
UNLOGGED_PATHS = frozenset({"/metrics"})


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OutreachJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping each record with `ts`, `level` and the current request id."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        if not log_record.get("ts"):
            log_record["ts"] = utc_timestamp()
        log_record["level"] = record.levelname

        req_id = request_id_ctx.get()
        if req_id and "request_id" not in log_record:
            log_record["request_id"] = req_id


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Send the root logger and the uvicorn loggers to one stdout handler
    writing one JSON object per line.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(OutreachJsonFormatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(log_level.upper())
    root.handlers = [handler]

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.propagate = False

    # Requests are logged by RequestLoggingMiddleware instead
    logging.getLogger("uvicorn.access").disabled = True

    return root


def completion_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id, echo it in `X-Request-ID`, record HTTP
    metrics and write one "Request completed" line carrying the patient
    fields a handler attached with `log_patient_data`.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            elapsed = time.perf_counter() - started

            path = request.url.path
            if path not in UNLOGGED_PATHS:
                record_http_request(request.method, path, response.status_code, elapsed)
                self._log_completion(request, response, elapsed)

            return response
        finally:
            request_id_ctx.reset(token)

    @staticmethod
    def _log_completion(request: Request, response: Response, elapsed: float) -> None:
        fields = {
            "request_id": request.state.request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "latency_ms": round(elapsed * 1000, 2),
        }
        fields.update(getattr(request.state, "patient_log_data", {}))
        logging.getLogger("outreach.requests").log(
            completion_level(response.status_code), "Request completed", extra=fields
        )


def log_patient_data(request: Request, patient_id: Optional[str] = None, result: Optional[str] = None):
    """
    Attach patient fields to the request so the middleware adds them to
    the request log line.
    """
    fields = {"patient_id": patient_id, "result": result}
    request.state.patient_log_data = {k: v for k, v in fields.items() if v is not None}
