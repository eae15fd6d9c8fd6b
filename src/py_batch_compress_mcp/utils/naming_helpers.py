"""文件命名工具模块。

为暂存的上传文件和输出产物生成互不冲突的文件名。
"""

import re
import time
import uuid
from pathlib import Path

from ..models.constants import get_extension


_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")


class FileNamingStrategy:
    """文件命名策略类

    名称由毫秒时间戳、随机令牌和清理后的原始文件名组成，
    保证并发批次写入同一目录时不会冲突。
    """

    @staticmethod
    def sanitize(original_name: str) -> str:
        """去掉路径部分和不安全字符"""
        # 同时兼容 Windows 风格的路径分隔符
        base = Path(original_name.replace("\\", "/")).name
        cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
        return cleaned or "image"

    @staticmethod
    def unique_prefix() -> str:
        """生成 时间戳_随机令牌 前缀"""
        return f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"

    @classmethod
    def staged_input_name(cls, original_name: str) -> str:
        """上传文件暂存名"""
        return f"{cls.unique_prefix()}_{cls.sanitize(original_name)}"

    @classmethod
    def artifact_name(cls, original_name: str, format_name: str) -> str:
        """输出产物文件名

        Args:
            original_name: 原始文件名
            format_name: 实际编码格式

        Returns:
            str: 生成的文件名（不含路径）
        """
        return (
            f"{cls.unique_prefix()}_{cls.sanitize(original_name)}"
            f"{get_extension(format_name)}"
        )


class PathResolver:
    """路径解析器"""

    @staticmethod
    def staging_path(directory: Path, original_name: str) -> Path:
        return directory / FileNamingStrategy.staged_input_name(original_name)

    @staticmethod
    def artifact_path(directory: Path, original_name: str, format_name: str) -> Path:
        return directory / FileNamingStrategy.artifact_name(original_name, format_name)

    @staticmethod
    def partial_path(path: Path) -> Path:
        """写入过程中使用的临时路径"""
        return path.with_name(f"{path.name}.part")
