"""核心模块包。

单张图片的转换流水线、格式处理和输出交付。
"""

from .formats import FormatProcessor, flatten, has_alpha
from .pipeline import TransformPipeline, process_image
from .sink import HandleSink, InlineSink, OutputSink, create_sink


__all__ = [
    "FormatProcessor",
    "HandleSink",
    "InlineSink",
    "OutputSink",
    "TransformPipeline",
    "create_sink",
    "flatten",
    "has_alpha",
    "process_image",
]
