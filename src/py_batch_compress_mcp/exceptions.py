"""批量图片转换异常处理模块。

定义统一的异常类和错误处理机制，包含异常处理装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.batch_result import ImageFailure
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")

NO_IMAGES_MESSAGE = "No images uploaded"


# 统一的异常类型
class CompressionError(Exception):
    """批量转换相关错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class BatchValidationError(CompressionError):
    """批次校验错误，整个请求被拒绝"""

    def __init__(self, message: str = NO_IMAGES_MESSAGE):
        super().__init__(message)


class ImagePipelineError(CompressionError):
    """单张图片处理流水线中的错误，在图片边界被捕获"""

    def __init__(
        self, message: str, stage: str = "处理", input_path: Path | None = None
    ):
        super().__init__(message, input_path)
        self.stage = stage


class UnsupportedFormatError(ImagePipelineError):
    """源图无法识别或目标格式不受支持"""

    pass


class ResourceCleanupError(CompressionError):
    """暂存文件清理失败，只作诊断用途"""

    pass


def handle_image_errors(stage: str = "图像处理"):
    """统一的图像处理异常处理装饰器

    把 Pillow 和系统异常转换为带阶段信息的 ImagePipelineError。

    Args:
        stage: 处理阶段名称（解码、尺寸调整、编码等）
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImagePipelineError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{stage} - 无法识别图像格式: {e}")
                raise UnsupportedFormatError(
                    MessageFormatter.stage_failed(stage, f"无法识别图像格式: {e}"),
                    stage,
                ) from e
            except DecompressionBombError as e:
                logger.error(f"{stage} - 图像过大: {e}")
                raise ImagePipelineError(
                    MessageFormatter.stage_failed(stage, f"图像过大: {e}"), stage
                ) from e
            except OSError as e:
                logger.error(f"{stage} - 文件操作失败: {e}")
                raise ImagePipelineError(
                    MessageFormatter.stage_failed(stage, e), stage
                ) from e
            except (ValueError, TypeError) as e:
                logger.error(f"{stage} - 参数错误: {e}")
                raise ImagePipelineError(
                    MessageFormatter.stage_failed(stage, e), stage
                ) from e
            except Exception as e:
                logger.error(f"{stage} - 未知错误: {e}")
                raise ImagePipelineError(
                    MessageFormatter.stage_failed(stage, e), stage
                ) from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误处理和日志记录功能。
    """

    @staticmethod
    def _log_error(
        operation: str, target: str | Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录"""
        log_msg = MessageFormatter.format_error(operation, target, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def create_failure(original_name: str, error: Exception) -> ImageFailure:
        """把单张图片的异常转换为失败结果，支持 match-case 错误分发"""
        match error:
            case UnsupportedFormatError() as ufe:
                ErrorHandler._log_error(ufe.stage, original_name, ufe, "warning")
                message = ufe.message
            case ImagePipelineError() as ipe:
                ErrorHandler._log_error(ipe.stage, original_name, ipe, "error")
                message = ipe.message
            case CompressionError() as ce:
                ErrorHandler._log_error("图片处理", original_name, ce, "error")
                message = ce.message
            case _:
                logger.exception(
                    MessageFormatter.format_error("图片处理", original_name, error)
                )
                message = MessageFormatter.stage_failed("处理", error)

        return ImageFailure(original_name=original_name, error=message)
