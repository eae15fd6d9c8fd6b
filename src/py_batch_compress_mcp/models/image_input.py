"""输入图片模型。"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class UploadedPart(BaseModel):
    """请求中的一个已解析二进制部分"""

    model_config = ConfigDict(frozen=True)

    field_name: str = Field(description="表单字段名")
    filename: str = Field(description="原始文件名")
    data: bytes = Field(repr=False, description="原始字节")


class ImageInput(BaseModel):
    """已暂存到磁盘的待处理图片

    在单张图片处理期间由批处理器独占，处理结束后暂存文件被删除。
    """

    original_name: str = Field(description="原始文件名")
    original_size: int = Field(ge=0, description="原始字节数")
    path: Path = Field(description="暂存文件路径")

    @property
    def extension(self) -> str:
        """原始文件名的小写扩展名（含点）"""
        return Path(self.original_name).suffix.lower()
