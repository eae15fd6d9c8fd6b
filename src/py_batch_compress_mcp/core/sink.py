"""输出交付模块。

把编码后的字节交给调用方：内联为 base64，或落盘后返回定位符。
"""

import base64
import os
from abc import ABC, abstractmethod
from pathlib import Path

from ..models.batch_result import OutputVariant, format_ratio
from ..utils.cleanup_helpers import remove_quietly
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import PathResolver


logger = get_logger()


class OutputSink(ABC):
    """输出交付接口"""

    mode: str = ""

    def emit(
        self, original_name: str, original_size: int, format_name: str, payload: bytes
    ) -> OutputVariant:
        """交付一个变体并返回其描述，字节的所有权转移给交付端"""
        compressed_size = len(payload)
        return self._deliver(
            original_name,
            format_name,
            payload,
            compressed_size=compressed_size,
            ratio=format_ratio(original_size, compressed_size),
        )

    @abstractmethod
    def _deliver(
        self,
        original_name: str,
        format_name: str,
        payload: bytes,
        compressed_size: int,
        ratio: str,
    ) -> OutputVariant: ...

    def discard(self, variant: OutputVariant) -> None:
        """撤销已交付的变体（所属图片后续失败时调用）"""


class InlineSink(OutputSink):
    """内联模式：base64 编码后直接放进响应，不留下任何文件"""

    mode = "inline"

    def _deliver(
        self,
        _original_name: str,
        format_name: str,
        payload: bytes,
        compressed_size: int,
        ratio: str,
    ) -> OutputVariant:
        return OutputVariant(
            format=format_name,
            compressed_size=compressed_size,
            ratio=ratio,
            compressed_file=base64.b64encode(payload).decode("ascii"),
        )


class HandleSink(OutputSink):
    """定位符模式：写入产物目录，响应中只返回定位符

    先写入 .part 文件再原子重命名，失败时删除半成品。
    """

    mode = "handle"

    def __init__(self, artifact_dir: Path, base_url: str = "/compressed") -> None:
        self.artifact_dir = Path(artifact_dir)
        self.base_url = base_url.rstrip("/")

    def _deliver(
        self,
        original_name: str,
        format_name: str,
        payload: bytes,
        compressed_size: int,
        ratio: str,
    ) -> OutputVariant:
        target = PathResolver.artifact_path(
            self.artifact_dir, original_name, format_name
        )
        partial = PathResolver.partial_path(target)

        try:
            partial.write_bytes(payload)
            os.replace(partial, target)
        except OSError:
            remove_quietly(partial)
            raise

        logger.debug(f"已写入产物: {target}")
        return OutputVariant(
            format=format_name,
            compressed_size=compressed_size,
            ratio=ratio,
            compressed_url=f"{self.base_url}/{target.name}",
        )

    def locate(self, variant: OutputVariant) -> Path | None:
        """把定位符解析回产物路径"""
        if not variant.compressed_url:
            return None
        return self.artifact_dir / variant.compressed_url.rsplit("/", 1)[-1]

    def discard(self, variant: OutputVariant) -> None:
        path = self.locate(variant)
        if path is not None:
            remove_quietly(path)


def create_sink(
    mode: str, artifact_dir: Path | None = None, base_url: str = "/compressed"
) -> OutputSink:
    """按部署配置创建交付端"""
    match mode:
        case "inline":
            return InlineSink()
        case "handle":
            if artifact_dir is None:
                raise ValueError("handle 模式需要产物目录")
            return HandleSink(artifact_dir, base_url)
        case _:
            raise ValueError(f"未知的交付模式: {mode}")
