"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from ..config import AppConfig


PACKAGE_LOGGER = "py_batch_compress_mcp"


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


def setup_logging(app_config: "AppConfig") -> logging.Logger:
    """按配置为包级日志记录器安装处理器。

    重复调用不会叠加处理器。

    Args:
        app_config: 应用配置

    Returns:
        logging.Logger: 包级日志记录器
    """
    settings = app_config.logging
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(settings.LOG_LEVEL)

    if package_logger.handlers:
        return package_logger

    formatter = logging.Formatter(settings.LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    package_logger.addHandler(stream_handler)

    if settings.ENABLE_FILE_LOGGING:
        app_config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            app_config.log_dir / settings.LOG_FILE_NAME,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger
