"""日志配置：控制台彩色输出 + 按天滚动的文件日志，每条记录附带请求 ID。"""

import json
import logging
import logging.config
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Optional

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"

# 由本模块接管输出的 logger；其余第三方 logger 走 root
_MANAGED_LOGGERS = ("app", "uvicorn", "uvicorn.error", "uvicorn.access")
# 上传解析器在 DEBUG 级别会逐块打印，单独压到 WARNING
_QUIET_LOGGERS = ("multipart", "python_multipart")

_request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class TimezoneFormatter(logging.Formatter):
    """时间戳按 ``TIMEZONE`` 渲染。"""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        moment = datetime.fromtimestamp(record.created, get_settings().timezone_info)
        if datefmt:
            return moment.strftime(datefmt)
        return moment.isoformat(sep=" ", timespec="milliseconds")


class ColorFormatter(TimezoneFormatter):
    """终端下只给级别名上色，重定向到文件或管道时保持纯文本。"""

    RESET = "\033[0m"
    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;41m",
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None, use_colors: Optional[bool] = None):
        super().__init__(fmt=fmt or LOG_FORMAT, datefmt=datefmt)
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname) if self.use_colors else None
        if color is None:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JsonFormatter(TimezoneFormatter):
    """一行一个 JSON 对象，便于日志采集按 request_id 串联同一请求。"""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get() or "-"
        return True


def _build_config(settings: Settings) -> dict[str, Any]:
    level = settings.log_level
    file_formatter = "json" if settings.log_json else "plain"
    handlers = ["console", "file"]

    loggers: dict[str, Any] = {
        name: {"handlers": handlers, "level": level, "propagate": False} for name in _MANAGED_LOGGERS
    }
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"()": f"{__name__}.ColorFormatter"},
            "plain": {"()": f"{__name__}.TimezoneFormatter", "format": LOG_FORMAT},
            "json": {"()": f"{__name__}.JsonFormatter"},
        },
        "filters": {"request_id": {"()": f"{__name__}.RequestIdFilter"}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if settings.log_json else "console",
                "filters": ["request_id"],
            },
            "file": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "level": level,
                "formatter": file_formatter,
                "filename": str(settings.log_file_path),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
                "delay": True,
                "filters": ["request_id"],
            },
        },
        "loggers": loggers,
        "root": {"handlers": handlers, "level": level},
    }


def setup_logging() -> None:
    """按当前配置初始化日志；重复调用会以最新配置覆盖。"""
    settings = get_settings()
    settings.log_directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_build_config(settings))


logger = logging.getLogger("app")


def set_request_id(request_id: Optional[str]) -> None:
    _request_id_ctx.set(request_id)
