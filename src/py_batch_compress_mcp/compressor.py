"""批量图片压缩器接口。

基于批处理引擎的简洁用户接口：接收已解析的上传部分和请求字段，
返回与输入顺序一致的 JSON 结果。
"""

from collections.abc import Iterable, Mapping
from http import HTTPStatus
from pathlib import Path
from typing import Any

from .config import AppConfig, get_config
from .core.sink import OutputSink, create_sink
from .engine.batch import BatchProcessor
from .engine.intake import read_part_from_file, select_image_parts, stage_parts
from .engine.resolver import FieldValue
from .exceptions import BatchValidationError
from .models.batch_result import BatchResult, ImageFailure
from .models.image_input import UploadedPart
from .utils.cleanup_helpers import remove_quietly
from .utils.file_helpers import expand_image_paths
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()


class BatchCompressor:
    """批量图片压缩器

    交付模式由部署配置决定，不受单个请求影响。
    """

    def __init__(
        self,
        app_config: AppConfig | None = None,
        sink: OutputSink | None = None,
        max_workers: int | None = None,
    ):
        """初始化压缩器。

        Args:
            app_config: 应用配置，默认使用全局配置
            sink: 输出交付端，默认按配置的交付模式创建
            max_workers: 并发数，默认取配置值
        """
        self.config = app_config or get_config()
        self.config.ensure_storage_dirs()

        self.sink = sink or create_sink(
            self.config.storage.DELIVERY_MODE,
            artifact_dir=self.config.artifact_dir,
            base_url=self.config.storage.PUBLIC_BASE_URL,
        )
        self.batch_processor = BatchProcessor(
            sink=self.sink,
            max_workers=max_workers or self.config.processing.MAX_WORKERS,
        )

        logger.debug(f"初始化批量压缩器, 交付模式={self.sink.mode}")

    def compress(
        self, parts: Iterable[UploadedPart], fields: Mapping[str, FieldValue]
    ) -> BatchResult:
        """处理一个批次

        Args:
            parts: 请求中的全部二进制部分，只有 images* 字段会被处理
            fields: 批次共享的转换参数

        Returns:
            BatchResult: 批量结果

        Raises:
            BatchValidationError: 请求中没有图片，此时不会产生任何副作用
        """
        image_parts = select_image_parts(
            parts, self.config.processing.IMAGE_FIELD_PREFIX
        )
        if not image_parts:
            raise BatchValidationError()

        images = stage_parts(image_parts, self.config.staging_dir)
        try:
            return self.batch_processor.process(images, fields)
        finally:
            # 正常情况下每张图片已自行清理，这里兜底处理意外中断
            for image in images:
                remove_quietly(image.path)

    def compress_files(
        self, paths: Iterable[str | Path], fields: Mapping[str, FieldValue]
    ) -> BatchResult:
        """把磁盘上的文件（或目录中的图片）作为一个批次处理

        每个文件路径在结果中占一个位置，无法读取的路径记为失败，
        不影响同批其他文件。

        Raises:
            BatchValidationError: 展开后没有任何文件路径
        """
        files = expand_image_paths(paths)
        if not files:
            raise BatchValidationError()

        parts: list[UploadedPart] = []
        unreadable: dict[int, ImageFailure] = {}
        for index, path in enumerate(files):
            if not path.is_file():
                unreadable[index] = ImageFailure(
                    original_name=path.name,
                    error=MessageFormatter.file_not_found(path),
                )
                continue
            try:
                parts.append(read_part_from_file(path))
            except OSError as e:
                logger.warning(MessageFormatter.format_error("读取文件", path, e))
                unreadable[index] = ImageFailure(
                    original_name=path.name,
                    error=MessageFormatter.operation_failed("读取文件", path, e),
                )

        processed = iter(self.compress(parts, fields).results if parts else [])
        return BatchResult(
            results=[
                unreadable[index] if index in unreadable else next(processed)
                for index in range(len(files))
            ]
        )

    def handle_request(
        self, parts: Iterable[UploadedPart], fields: Mapping[str, FieldValue]
    ) -> tuple[int, Any]:
        """返回 (状态码, JSON 响应体)

        没有图片时返回 400 和 {"error": "No images uploaded"}；
        单张图片的失败都包含在 200 响应的结果数组中。
        """
        try:
            result = self.compress(parts, fields)
        except BatchValidationError as e:
            logger.warning(f"批次被拒绝: {e.message}")
            return HTTPStatus.BAD_REQUEST.value, {"error": e.message}

        return HTTPStatus.OK.value, result.to_response()


def compress_batch(
    parts: Iterable[UploadedPart], fields: Mapping[str, FieldValue]
) -> list[dict[str, Any]]:
    """使用全局配置处理一个批次并返回 JSON 结果数组"""
    return BatchCompressor().compress(parts, fields).to_response()
