"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def stage_failed(stage: str, error: Exception | str) -> str:
        """处理阶段失败消息，作为单张图片的错误信息返回给调用方"""
        return f"{stage}失败: {error}"

    @staticmethod
    def unsupported_format(format_name: str, supported: list[str]) -> str:
        """不支持的目标格式消息"""
        return f"不支持的目标格式: {format_name!r}，可用格式: {', '.join(supported)}"

    @staticmethod
    def format_error(operation: str, target: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def variant_summary(
        name: str, format_name: str, original: str, compressed: str, ratio: str
    ) -> str:
        """单个输出变体的摘要"""
        return f"{name} → {format_name}: {original} → {compressed} ({ratio})"
