"""批量图片压缩 MCP 服务器。

把磁盘上的图片作为一个批次交给压缩核心处理。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .compressor import BatchCompressor
from .config import get_config
from .engine.resolver import FieldValue
from .exceptions import BatchValidationError
from .models.constants import RequestFields
from .utils.logging_helpers import get_logger, setup_logging
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPBatchResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def success(results: list[dict[str, Any]], summary: str) -> dict[str, Any]:
        return {
            "success": True,
            "status": 200,
            "summary": summary,
            "results": results,
        }

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            status: 对应的 HTTP 状态码
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "status": status,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str) -> dict[str, Any]:
        """构建批次校验错误结果"""
        return MCPResponseBuilder.error(
            message=message, error_type="validation", status=400
        )

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> dict[str, Any]:
        """构建处理错误结果"""
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(
            message=message, error_type="processing", details=details
        )


# 配置日志
setup_logging(get_config())
logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量图片压缩服务")

# 全局压缩器实例，启动时完成目录初始化
compressor = BatchCompressor()


def build_fields(
    quality_jpeg: int | None = None,
    quality_png: int | None = None,
    quality_webp: int | None = None,
    quality_avif: int | None = None,
    resize_width: int | None = None,
    resize_height: int | None = None,
    crop: bool = False,
    keep_transparency: bool = False,
    convert_to: list[str] | str | None = None,
) -> dict[str, FieldValue]:
    """把工具参数转换为请求字段映射"""
    fields: dict[str, FieldValue] = {
        RequestFields.QUALITY["jpeg"]: quality_jpeg,
        RequestFields.QUALITY["png"]: quality_png,
        RequestFields.QUALITY["webp"]: quality_webp,
        RequestFields.QUALITY["avif"]: quality_avif,
        RequestFields.RESIZE_WIDTH: resize_width,
        RequestFields.RESIZE_HEIGHT: resize_height,
        RequestFields.CROP: 1 if crop else 0,
        RequestFields.KEEP_TRANSPARENCY: 1 if keep_transparency else 0,
        RequestFields.CONVERT_TO: convert_to,
    }
    return {name: value for name, value in fields.items() if value is not None}


def run_batch(image_paths: list[str], fields: dict[str, FieldValue]) -> MCPBatchResponse:
    """执行一个批次并构建 MCP 响应"""
    try:
        result = compressor.compress_files(image_paths, fields)
    except BatchValidationError as e:
        return MCPResponseBuilder.validation_error(e.message)
    except Exception as e:
        target = ", ".join(Path(p).name for p in image_paths)
        logger.error(MessageFormatter.operation_failed("批量压缩", target, e))
        return MCPResponseBuilder.processing_error(str(e), "批量压缩")

    return MCPResponseBuilder.success(result.to_response(), result.get_summary())


@mcp.tool()
def compress_batch(
    image_paths: list[str],
    quality_jpeg: int | None = None,
    quality_png: int | None = None,
    quality_webp: int | None = None,
    quality_avif: int | None = None,
    resize_width: int | None = None,
    resize_height: int | None = None,
    crop: bool = False,
    keep_transparency: bool = False,
    convert_to: list[str] | str | None = None,
) -> MCPBatchResponse:
    """批量压缩/转换图片。

    所有图片共享同一组参数，每张图片输出一个或多个变体，并报告大小和压缩比。

    Args:
        image_paths: 图片文件或目录路径列表
        quality_jpeg: JPEG 质量 0-100（默认 75）
        quality_png: PNG 质量 0-100（默认 80，PNG 始终无损）
        quality_webp: WebP 质量 0-100（默认 75）
        quality_avif: AVIF 质量 0-100（默认 50）
        resize_width: 目标宽度
        resize_height: 目标高度
        crop: True 时覆盖并裁剪到目标尺寸，否则缩放到目标框内
        keep_transparency: 保留透明通道，否则合成到白色背景
        convert_to: 目标格式列表或逗号分隔字符串（jpeg/jpg/png/webp/avif）

    Returns:
        dict: 每个文件路径一项的结果数组，顺序与输入一致；
            不存在或无法读取的路径在原位置记为失败
    """
    fields = build_fields(
        quality_jpeg=quality_jpeg,
        quality_png=quality_png,
        quality_webp=quality_webp,
        quality_avif=quality_avif,
        resize_width=resize_width,
        resize_height=resize_height,
        crop=crop,
        keep_transparency=keep_transparency,
        convert_to=convert_to,
    )
    return run_batch(image_paths, fields)


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动批量图片压缩 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
