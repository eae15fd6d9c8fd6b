"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .cleanup_helpers import TempFileManager, remove_quietly, staged_file
from .file_helpers import expand_image_paths
from .logging_helpers import get_logger, setup_logging
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy, PathResolver


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "TempFileManager",
    "expand_image_paths",
    "get_logger",
    "remove_quietly",
    "setup_logging",
    "staged_file",
]
