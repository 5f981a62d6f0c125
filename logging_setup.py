import logging
import os
import json
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    - Merges dict messages into the top-level payload.
    - Includes timestamp, level, logger, module, func, line.
    - Appends exc_info when present.
    - Carries along any extra attributes attached to the LogRecord.
    """

    STD_KEYS = {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
        "relativeCreated", "thread", "threadName", "processName", "process", "stacklevel",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }

        msg = record.msg
        if isinstance(msg, dict):
            payload.update(msg)
        else:
            payload["message"] = record.getMessage()

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for k, v in record.__dict__.items():
            if k in self.STD_KEYS or k.startswith("_") or k in payload:
                continue
            try:
                json.dumps(v)  # ensure serializable
                payload[k] = v
            except (TypeError, ValueError):
                payload[k] = str(v)

        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once with a consistent format.

    - Honors LOG_LEVEL env (DEBUG, INFO, WARNING, ERROR) if provided.
    - If handlers already exist, only adjusts levels and formatters to avoid duplicates.
    - Optional file logging via LOG_TO_FILE=true and LOG_FILE_PATH (default: app.log).
    - Also aligns the uvicorn loggers to the same level.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    root = logging.getLogger()
    json_formatter = JsonFormatter()

    if root.handlers:
        root.setLevel(numeric_level)
        for h in root.handlers:
            h.setLevel(numeric_level)
            h.setFormatter(json_formatter)
    else:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(numeric_level)
        stream_handler.setFormatter(json_formatter)
        root.addHandler(stream_handler)
        root.setLevel(numeric_level)

    if os.getenv("LOG_TO_FILE", "false").lower() in {"1", "true", "yes"}:
        log_file = os.path.abspath(os.getenv("LOG_FILE_PATH", "app.log"))
        already_attached = any(
            isinstance(h, RotatingFileHandler) and getattr(h, "baseFilename", None) == log_file
            for h in root.handlers
        )
        if not already_attached:
            try:
                file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
            except OSError as e:
                logging.warning(f"File logging disabled, could not open {log_file}: {e}")
            else:
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(json_formatter)
                root.addHandler(file_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(numeric_level)
        for h in lg.handlers:
            h.setLevel(numeric_level)
            h.setFormatter(json_formatter)
