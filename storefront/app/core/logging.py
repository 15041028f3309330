import json
import logging
import os
from typing import Optional

# loggers that bring their own handlers; they are pointed at ours instead
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg (+ exc when present)."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonLineFormatter()
    return logging.Formatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    sql_echo: bool = False,
) -> None:
    """
    Point the root logger (and uvicorn's) at a single stderr handler.

    level: INFO|DEBUG|... (falls back to LOG_LEVEL, then INFO)
    fmt: text|json (falls back to LOG_FORMAT, then text)
    sql_echo: let SQLAlchemy's statement log through at INFO
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter((fmt or os.getenv("LOG_FORMAT") or "text").lower()))

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in _SERVER_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers = [handler]
        lg.setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if sql_echo else logging.WARNING)
