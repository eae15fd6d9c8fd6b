"""清理工具模块。

提供暂存文件清理和资源管理功能。清理失败只记录日志，不会中断批处理。
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .logging_helpers import get_logger


logger = get_logger()


def remove_quietly(file_path: Path) -> bool:
    """删除文件，失败时记录警告

    Returns:
        bool: 文件是否被删除
    """
    # 延迟导入，避免 utils 与 exceptions 循环依赖
    from ..exceptions import ResourceCleanupError

    try:
        file_path.unlink(missing_ok=True)
        return True
    except OSError as e:
        error = ResourceCleanupError(f"清理暂存文件失败: {e}", file_path)
        logger.warning(error.message)
        return False


class TempFileManager:
    """临时文件管理器"""

    def __init__(self):
        self.temp_files: list[Path] = []

    def register_temp_file(self, file_path: Path) -> None:
        """注册临时文件"""
        self.temp_files.append(file_path)

    def cleanup_temp_files(self) -> int:
        """清理所有注册的临时文件"""
        cleaned_count = 0
        for file_path in self.temp_files:
            existed = file_path.exists()
            if remove_quietly(file_path) and existed:
                cleaned_count += 1
                logger.debug(f"已清理临时文件: {file_path}")

        self.temp_files.clear()
        return cleaned_count

    def __enter__(self):
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """上下文管理器退出时清理临时文件"""
        # 忽略异常信息，总是清理临时文件
        del exc_type, exc_val, exc_tb
        self.cleanup_temp_files()


@contextmanager
def staged_file(file_path: Path) -> Iterator[Path]:
    """在作用域结束时无条件删除的暂存文件

    成功、失败或未识别格式等所有退出路径都会执行清理。
    """
    with TempFileManager() as manager:
        manager.register_temp_file(file_path)
        yield file_path
