"""工具函数模块。

提供图像文件查找相关的实用工具函数。
"""

from collections.abc import Iterable
from pathlib import Path

from PIL import Image

from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def expand_image_paths(paths: Iterable[str | Path]) -> list[Path]:
    """展开路径列表，目录按文件名排序展开为其中的图像文件

    文件路径原样保留（即使不是图片，由流水线报告解码失败）。
    不存在的路径也保留在原位置并记录警告，由调用方为其生成失败结果。

    Args:
        paths: 文件或目录路径

    Returns:
        list[Path]: 按输入顺序展开后的文件路径
    """
    supported_extensions = set(Image.registered_extensions().keys())
    expanded: list[Path] = []

    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            expanded.extend(
                sorted(
                    p
                    for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in supported_extensions
                )
            )
        else:
            if not path.is_file():
                logger.warning(MessageFormatter.file_not_found(path))
            expanded.append(path)

    return expanded
