"""批处理结果模型。

定义输出变体、单张图片结果以及批次结果的数据结构。
"""

from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, Field


def format_ratio(original_size: int, compressed_size: int) -> str:
    """压缩比字符串：(1 - 压缩后/原始) * 100，保留两位小数并带 %

    输出比输入大时为负数；原始大小为 0 时记为 0.00%。
    """
    if original_size <= 0:
        return "0.00%"
    return f"{(1 - compressed_size / original_size) * 100:.2f}%"


class OutputVariant(BaseModel):
    """单个输出变体

    compressed_file（内联 base64）与 compressed_url（产物定位符）二选一。
    """

    format: str = Field(description="实际编码格式")
    compressed_size: int = Field(ge=0, description="压缩后字节数")
    ratio: str = Field(description="压缩比字符串")
    compressed_file: str | None = Field(None, description="base64 编码的产物")
    compressed_url: str | None = Field(None, description="产物定位符")

    def to_response(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ImageSuccess(BaseModel):
    """单张图片处理成功"""

    original_name: str
    original_size: int
    outputs: list[OutputVariant] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return True

    def get_total_compressed_size(self) -> int:
        return sum(v.compressed_size for v in self.outputs)

    def to_response(self) -> dict[str, Any]:
        return {
            "original_name": self.original_name,
            "original_size": self.original_size,
            "outputs": [v.to_response() for v in self.outputs],
        }


class ImageFailure(BaseModel):
    """单张图片处理失败"""

    original_name: str
    error: str

    @property
    def success(self) -> bool:
        return False

    def to_response(self) -> dict[str, Any]:
        return {"original_name": self.original_name, "error": self.error}


ImageResult = ImageSuccess | ImageFailure


class BatchResult(BaseModel):
    """批量处理结果，顺序与输入图片一致"""

    results: list[ImageResult] = Field(
        default_factory=list, description="每张图片的处理结果"
    )

    def get_successful_items(self) -> list[ImageSuccess]:
        return [r for r in self.results if isinstance(r, ImageSuccess)]

    def get_failed_items(self) -> list[ImageFailure]:
        return [r for r in self.results if isinstance(r, ImageFailure)]

    def get_total_count(self) -> int:
        return len(self.results)

    def get_success_count(self) -> int:
        return len(self.get_successful_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())

    def get_total_original_size(self) -> int:
        """成功图片的原始总大小"""
        return sum(r.original_size for r in self.get_successful_items())

    def get_total_compressed_size(self) -> int:
        """所有输出变体的总大小"""
        return sum(r.get_total_compressed_size() for r in self.get_successful_items())

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)

    def get_summary(self) -> str:
        """批量处理摘要"""
        total = self.get_total_count()
        successful = self.get_success_count()
        original = self.format_size(self.get_total_original_size())
        compressed = self.format_size(self.get_total_compressed_size())

        return (
            f"处理 {successful}/{total} 张图片, "
            f"原始 {original}, 输出合计 {compressed}"
        )

    def to_response(self) -> list[dict[str, Any]]:
        """转换为 JSON 响应数组"""
        return [r.to_response() for r in self.results]
