"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler

from ..config import get_config


PACKAGE_LOGGER = "image_zen"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(level: str | None = None, verbose: bool = False) -> None:
    """按 LoggingDefaults 配置包级日志

    Args:
        level: 日志级别，None 时使用配置默认值
        verbose: 详细模式，强制使用 DEBUG 级别
    """
    defaults = get_config().logging
    root = logging.getLogger(PACKAGE_LOGGER)

    resolved = "DEBUG" if verbose else (level or defaults.LOG_LEVEL).upper()
    root.setLevel(resolved)

    # 重复调用时不叠加处理器
    if root.handlers:
        return

    formatter = logging.Formatter(defaults.LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if defaults.ENABLE_FILE_LOGGING:
        file_handler = RotatingFileHandler(
            defaults.LOG_FILE_PATH,
            maxBytes=defaults.LOG_FILE_MAX_SIZE,
            backupCount=defaults.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
