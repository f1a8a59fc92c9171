"""
Logging for the Worknest backend.

Everything under the ``worknest`` logger goes to stdout (JSON, or colours
when debugging) and, with ``log_to_file``, to rotating files. The request
id assigned by ``LoggingMiddleware`` is attached to every record emitted
while that request is being served, and bearer tokens / JWTs are masked
before anything is written.
"""
import contextvars
import json
import logging
import logging.config
import re
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import get_settings

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")

# Attributes every LogRecord has, anything else came in through ``extra``
_RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

_SECRETS = (
    re.compile(r"(?i)(bearer\s+)[\w\-.~+/]+=*"),
    re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*"),
)
MASK = "[redacted]"

ROTATE_BYTES = 10_000_000
ROTATE_COUNT = 5


def redact(text: str) -> str:
    """Mask bearer credentials and compact JWTs in ``text``."""
    text = _SECRETS[0].sub(lambda m: m.group(1) + MASK, text)
    return _SECRETS[1].sub(MASK, text)


class RedactingFilter(logging.Filter):
    """Scrub tokens from the message and from string extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        for key, value in list(record.__dict__.items()):
            if key not in _RESERVED and isinstance(value, str):
                setattr(record, key, redact(value))
        return True


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, ``extra`` fields nested under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED}
        request_id = extra.pop('request_id', None)
        if request_id:
            entry['request_id'] = request_id
        if extra:
            entry['extra'] = extra

        if record.exc_info:
            exc_type, exc, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc) if exc else None,
                'traceback': redact(self.formatException(record.exc_info)),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Level-coloured console lines for local debugging."""

    LEVEL_COLORS = {
        'DEBUG': '36',
        'INFO': '32',
        'WARNING': '33',
        'ERROR': '31',
        'CRITICAL': '35',
    }

    def format(self, record: logging.LogRecord) -> str:
        # handlers share the record, so decorate a copy
        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelname)
        if color:
            record.levelname = f"\033[1;{color}m{record.levelname}\033[0m"
        record.name = f"\033[90m{record.name}\033[0m"
        return super().format(record)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Numeric level for a name like "debug", INFO when unknown."""
    level = logging.getLevelName((level_str or get_settings().log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def _rotating(path: Path, level: str, formatter: str) -> Dict[str, Any]:
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': str(path),
        'maxBytes': ROTATE_BYTES,
        'backupCount': ROTATE_COUNT,
        'formatter': formatter,
        'level': level,
        'filters': ['redact', 'request_id'],
        'encoding': 'utf-8',
    }


def _library_logger(level: str) -> Dict[str, Any]:
    return {'handlers': ['console'], 'level': level, 'propagate': False}


def build_logging_config() -> Dict[str, Any]:
    """dictConfig for the current settings."""
    settings = get_settings()

    handlers: Dict[str, Any] = {
        'console': {
            'class': 'logging.StreamHandler',
            'stream': sys.stdout,
            'formatter': 'colored' if settings.debug else 'json',
            'level': get_log_level(),
            'filters': ['redact', 'request_id'],
        },
    }
    app_handlers: List[str] = ['console']

    if settings.log_to_file:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers['file'] = _rotating(log_dir / 'worknest.log', 'DEBUG', 'text')
        handlers['error_file'] = _rotating(log_dir / 'error.log', 'ERROR', 'json')
        app_handlers += ['file', 'error_file']

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'filters': {
            'redact': {'()': RedactingFilter},
            'request_id': {'()': RequestIdFilter},
        },
        'formatters': {
            'json': {'()': JSONFormatter},
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s',
                'datefmt': '%H:%M:%S',
            },
            'text': {
                'format': '%(asctime)s | %(levelname)-8s | %(name)-22s | %(request_id)s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': handlers,
        'loggers': {
            'worknest': {'handlers': app_handlers, 'level': 'DEBUG', 'propagate': False},
            'uvicorn': _library_logger('INFO'),
            # LoggingMiddleware already logs every exchange
            'uvicorn.access': _library_logger('WARNING'),
            'sqlalchemy': _library_logger('WARNING'),
            'httpx': _library_logger('WARNING'),
            'authlib': _library_logger('WARNING'),
        },
    }


def setup_logging() -> None:
    """Apply the logging configuration."""
    settings = get_settings()
    logging.config.dictConfig(build_logging_config())
    get_logger('logging').info(
        "Logging configured",
        extra={'log_level': settings.log_level, 'environment': settings.environment},
    )


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``worknest`` namespace."""
    return logging.getLogger(f"worknest.{name}")


class LoggingMiddleware:
    """Raw ASGI middleware logging each HTTP exchange.

    Assigns a request id (or reuses an incoming X-Request-ID), exposes it
    to every log record through ``request_id_var`` and echoes it back in
    the response headers. Health probes are logged at DEBUG.
    """

    header_name = b"x-request-id"
    quiet_suffix = "/health"

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = headers.get(self.header_name, b"").decode() or uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id
        token = request_id_var.set(request_id)

        method, path = scope["method"], scope["path"]
        level = logging.DEBUG if path.endswith(self.quiet_suffix) else logging.INFO
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        self.logger.log(level, "%s %s", method, path, extra={
            'client_ip': scope["client"][0] if scope.get("client") else None,
            'user_agent': headers.get(b"user-agent", b"").decode() or None,
        })

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                message["headers"] = [*message.get("headers", []), (self.header_name, request_id.encode())]
                self.logger.log(level, "%s %s -> %s", method, path, message.get("status"), extra={
                    'status_code': message.get("status"),
                    'duration_ms': elapsed_ms(),
                })
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except Exception as exc:
            self.logger.error("%s %s failed", method, path, extra={
                'duration_ms': elapsed_ms(),
                'exception_type': type(exc).__name__,
            })
            raise
        finally:
            request_id_var.reset(token)
