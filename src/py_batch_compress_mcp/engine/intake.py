"""上传部分接收模块。

从已解析的请求部分中挑出图片，并写入暂存目录供批处理器使用。
"""

from collections.abc import Iterable
from pathlib import Path

from ..config import get_config
from ..exceptions import CompressionError
from ..models.image_input import ImageInput, UploadedPart
from ..utils.cleanup_helpers import remove_quietly
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import PathResolver


logger = get_logger()


def select_image_parts(
    parts: Iterable[UploadedPart], prefix: str | None = None
) -> list[UploadedPart]:
    """只保留字段名以图片前缀开头的部分，保持原有顺序"""
    prefix = prefix if prefix is not None else get_config().processing.IMAGE_FIELD_PREFIX
    return [part for part in parts if part.field_name.startswith(prefix)]


def stage_parts(parts: list[UploadedPart], staging_dir: Path) -> list[ImageInput]:
    """把图片字节写入暂存目录

    任一部分写入失败时删除本次已写入的暂存文件并抛出异常。

    Args:
        parts: 已筛选的图片部分
        staging_dir: 暂存目录

    Returns:
        list[ImageInput]: 与 parts 顺序一致的暂存图片
    """
    staged: list[ImageInput] = []
    path: Path | None = None
    try:
        for part in parts:
            path = PathResolver.staging_path(staging_dir, part.filename)
            path.write_bytes(part.data)
            staged.append(
                ImageInput(
                    original_name=part.filename,
                    original_size=len(part.data),
                    path=path,
                )
            )
    except OSError as e:
        for image in staged:
            remove_quietly(image.path)
        if path is not None:
            # 写入中途失败的半成品
            remove_quietly(path)
        raise CompressionError(
            MessageFormatter.operation_failed("暂存上传文件", staging_dir, e)
        ) from e

    logger.debug(f"已暂存 {len(staged)} 张图片到 {staging_dir}")
    return staged


def read_part_from_file(
    file_path: str | Path, field_name: str | None = None
) -> UploadedPart:
    """把磁盘文件包装为上传部分"""
    file_path = Path(file_path)
    return UploadedPart(
        field_name=field_name or get_config().processing.IMAGE_FIELD_PREFIX,
        filename=file_path.name,
        data=file_path.read_bytes(),
    )
