"""
统一日志管理模块
提供标准化的结构化日志记录功能
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from chongyang.core.config import settings
from chongyang.core.log_messages import log_messages

# LogRecord 自带属性，结构化字段不能与之重名
_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class UnifiedLogger:
    """
    结构化业务日志

    消息可以是模板，关键字参数既用于格式化模板，也作为结构化字段输出；
    extra 字典只作为结构化字段，不参与格式化。

    示例:
        logger.info("上传成功", extra={"key": key})
        logger.info(log_messages.BATCH_START, total=5, concurrency=3)
        logger.error("下载失败", exception=e, extra={"url": url})
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _format_extra_data(self, **kwargs: Any) -> Dict[str, Any]:
        """展开 extra 字典，与 LogRecord 属性重名的字段加 field_ 前缀"""
        extra = kwargs.pop("extra", None) or {}
        merged = {**kwargs, **extra}
        safe = {
            (f"field_{key}" if key in _RESERVED_RECORD_KEYS else key): value
            for key, value in merged.items()
        }
        return log_messages.get_structured_data(log_module=self.name, **safe)

    def _render(self, message_template: str, **kwargs: Any) -> str:
        """只有提供了格式化参数时才格式化，已经是成品的消息原样返回"""
        params = {key: value for key, value in kwargs.items() if key != "extra"}
        if not params:
            return message_template
        try:
            return log_messages.format_message(message_template, **params)
        except (KeyError, ValueError, IndexError):
            return message_template

    def _emit(self, level: str, message_template: str, **kwargs: Any) -> None:
        emit = getattr(self.logger, level)
        emit(self._render(message_template, **kwargs), extra=self._format_extra_data(**kwargs))

    def info(self, message_template: str, **kwargs: Any) -> None:
        self._emit("info", message_template, **kwargs)

    def warning(self, message_template: str, **kwargs: Any) -> None:
        self._emit("warning", message_template, **kwargs)

    def critical(self, message_template: str, **kwargs: Any) -> None:
        self._emit("critical", message_template, **kwargs)

    def debug(self, message_template: str, **kwargs: Any) -> None:
        """仅在 app_debug 打开时输出"""
        if settings.app_debug:
            self._emit("debug", message_template, **kwargs)

    def error(self, message_template: str, exception: Optional[BaseException] = None, **kwargs: Any) -> None:
        """
        记录错误日志

        Args:
            message_template: 日志消息
            exception: 附带的异常，会记录类型、消息和堆栈
            **kwargs: 格式化参数与结构化字段
        """
        if exception is None:
            self._emit("error", message_template, **kwargs)
            return

        fields = self._format_extra_data(**kwargs)
        fields["exception_type"] = type(exception).__name__
        fields["exception_message"] = str(exception)
        self.logger.error(self._render(message_template, **kwargs), extra=fields, exc_info=exception)


_registry: Dict[str, UnifiedLogger] = {}

# 输出过多的第三方库只保留 WARNING 及以上
QUIET_LOGGERS = ("uvicorn", "fastapi", "httpx", "httpcore", "qcloud_cos", "PIL")


def get_logger(name: str = __name__) -> UnifiedLogger:
    """按名称返回 UnifiedLogger，同名只创建一次"""
    logger = _registry.get(name)
    if logger is None:
        logger = _registry[name] = UnifiedLogger(name)
    return logger


def _resolve_level() -> int:
    if settings.app_debug:
        return logging.DEBUG
    level = logging.getLevelName(settings.log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """
    配置根日志记录器：UTF-8 文件输出（INFO 及以上）加标准输出

    重复调用会替换之前安装的处理器。
    """
    level = _resolve_level()
    formatter = logging.Formatter(settings.log_format)

    log_path = Path(settings.absolute_log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    to_file = logging.FileHandler(log_path, encoding="utf-8")
    to_file.setLevel(logging.INFO)

    to_stdout = logging.StreamHandler(sys.stdout)
    to_stdout.setLevel(level)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(level)
    for handler in (to_file, to_stdout):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    get_logger(__name__).info(
        log_messages.OPERATION_SUCCESS,
        operation_name="日志系统配置",
        extra={'log_file': str(log_path), 'level': logging.getLevelName(level)}
    )
