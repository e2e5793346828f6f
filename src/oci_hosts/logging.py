from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_JSON_SCALAR_TYPES = (str, int, float, bool)

_RESERVED_RECORD_FIELDS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    )
)


def _is_json_safe(value: object, depth: int = 3) -> bool:
    if isinstance(value, _JSON_SCALAR_TYPES):
        return True
    if depth <= 0:
        return False
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, (str, int, float, bool)) and k is not None:
                return False
            if not _is_json_safe(v, depth - 1):
                return False
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_json_safe(v, depth - 1) for v in value)
    return False


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    json_logs: bool = False


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # Include extra fields if present
        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_FIELDS or value is None:
                continue
            if _is_json_safe(value):
                payload[key] = value
        return json.dumps(payload, sort_keys=True)


class PlainFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
        message = record.getMessage()
        error = getattr(record, "error", None)
        if error:
            message = f"{message}: {error}"
        return f"{timestamp} {record.levelname} {record.name}: {message}"


def _level_from_str(level: str) -> int:
    value = getattr(logging, level.upper(), None)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(config: Optional[LogConfig] = None) -> None:
    """
    Configure root logger once. Subsequent calls are no-ops.
    Env overrides:
      - OCI_HOSTS_LOG_LEVEL (default INFO)
      - OCI_HOSTS_JSON_LOGS (1/true to enable)
    Logs go to stderr; stdout is reserved for --print output.
    """
    if getattr(setup_logging, "_configured", False):
        return

    env_level = os.getenv("OCI_HOSTS_LOG_LEVEL")
    env_json = os.getenv("OCI_HOSTS_JSON_LOGS")

    level = _level_from_str((config.level if config else None) or env_level or "INFO")
    json_logs = (config.json_logs if config else False) or (
        (env_json or "").lower() in ("1", "true", "yes")
    )

    handler = logging.StreamHandler(stream=sys.stderr)
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(PlainFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    # Avoid duplicate handlers if running under certain test runners
    root.handlers = [handler]

    # Reduce noise from the SDK unless explicitly raised
    logging.getLogger("oci").setLevel(max(level, logging.WARNING))

    setattr(setup_logging, "_configured", True)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
