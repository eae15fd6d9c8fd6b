"""批处理引擎模块。

包含参数解析、上传接收、并发执行和批量编排逻辑。
"""

from .batch import BatchProcessor
from .concurrent_executor import ConcurrentExecutor
from .intake import read_part_from_file, select_image_parts, stage_parts
from .resolver import ParameterResolver, resolve_parameters


__all__ = [
    "BatchProcessor",
    "ConcurrentExecutor",
    "ParameterResolver",
    "read_part_from_file",
    "resolve_parameters",
    "select_image_parts",
    "stage_parts",
]
