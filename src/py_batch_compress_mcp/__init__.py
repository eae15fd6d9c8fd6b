"""批量图片压缩与格式转换库。

一组上传图片共享一套转换参数，每张图片输出一个或多个重新编码的变体。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "批量图片压缩与格式转换，基于 Pillow 11"

# 核心功能导出
from .compressor import BatchCompressor, compress_batch
from .exceptions import BatchValidationError, ImagePipelineError
from .models.batch_result import BatchResult, ImageFailure, ImageSuccess, OutputVariant
from .models.image_input import UploadedPart
from .models.transform_config import TransformConfig


__all__ = [
    "BatchCompressor",
    "BatchResult",
    "BatchValidationError",
    "ImageFailure",
    "ImagePipelineError",
    "ImageSuccess",
    "OutputVariant",
    "TransformConfig",
    "UploadedPart",
    "compress_batch",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
