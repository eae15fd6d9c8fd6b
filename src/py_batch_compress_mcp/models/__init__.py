"""数据模型包。

定义批量图片转换相关的数据结构和模型。
"""

from .batch_result import (
    BatchResult,
    ImageFailure,
    ImageResult,
    ImageSuccess,
    OutputVariant,
    format_ratio,
)
from .constants import (
    ImageFormats,
    QualityLimits,
    RequestFields,
    get_extension,
    get_format_alias,
    get_pillow_format,
)
from .image_input import ImageInput, UploadedPart
from .transform_config import FitPolicy, TransformConfig


__all__ = [
    "BatchResult",
    "FitPolicy",
    "ImageFailure",
    "ImageFormats",
    "ImageInput",
    "ImageResult",
    "ImageSuccess",
    "OutputVariant",
    "QualityLimits",
    "RequestFields",
    "TransformConfig",
    "UploadedPart",
    "format_ratio",
    "get_extension",
    "get_format_alias",
    "get_pillow_format",
]
