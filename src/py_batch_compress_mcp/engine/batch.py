"""批量处理器模块。

驱动转换流水线处理批次中的每张图片，隔离单张失败并按输入顺序汇总结果。
"""

from collections.abc import Mapping, Sequence

from ..core.formats import FormatProcessor
from ..core.pipeline import TransformPipeline
from ..core.sink import OutputSink
from ..exceptions import BatchValidationError, ErrorHandler
from ..models.batch_result import BatchResult, ImageResult
from ..models.image_input import ImageInput
from ..models.transform_config import TransformConfig
from ..utils.cleanup_helpers import staged_file
from ..utils.logging_helpers import get_logger
from .concurrent_executor import ConcurrentExecutor
from .resolver import FieldValue, ParameterResolver


logger = get_logger()


class BatchProcessor:
    """批量图像处理器

    每个批次只解析一次参数；每张图片在独立的失败边界中处理，
    处理结束后无论成败都删除其暂存文件。
    """

    def __init__(
        self,
        sink: OutputSink,
        max_workers: int = 1,
        resolver: ParameterResolver | None = None,
    ):
        """初始化批量处理器

        Args:
            sink: 输出交付端
            max_workers: 最大并发数，1 为串行
            resolver: 参数解析器实例
        """
        self.sink = sink
        self.resolver = resolver or ParameterResolver()
        self.concurrent_executor = ConcurrentExecutor(max_workers)
        self.format_processor = FormatProcessor()

    def process(
        self, images: Sequence[ImageInput], fields: Mapping[str, FieldValue]
    ) -> BatchResult:
        """处理一个批次

        Args:
            images: 已暂存的输入图片
            fields: 批次共享的请求字段

        Returns:
            BatchResult: 与输入顺序一致的结果

        Raises:
            BatchValidationError: 没有任何输入图片
        """
        if not images:
            raise BatchValidationError()

        config = self.resolver.resolve(fields)
        return self.process_with_config(images, config)

    def process_with_config(
        self, images: Sequence[ImageInput], config: TransformConfig
    ) -> BatchResult:
        """使用已解析的配置处理一个批次"""
        if not images:
            raise BatchValidationError()

        pipeline = TransformPipeline(config, self.sink, self.format_processor)
        logger.info(
            f"开始处理批次: {len(images)} 张图片, 目标格式={config.target_formats or '自动'}"
        )

        results = self.concurrent_executor.execute_tasks(
            items=list(images),
            task_function=lambda image: self._process_one(pipeline, image),
        )

        batch_result = BatchResult(results=results)
        logger.info(batch_result.get_summary())
        return batch_result

    def _process_one(
        self, pipeline: TransformPipeline, image: ImageInput
    ) -> ImageResult:
        """单张图片的失败边界"""
        with staged_file(image.path):
            try:
                return pipeline.run(image)
            except Exception as e:
                return ErrorHandler.create_failure(image.original_name, e)
