"""转换配置模型。

定义一个批次共享的转换参数。
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .constants import QualityLimits, get_format_alias


def default_qualities() -> dict[str, int]:
    # 延迟导入，保证测试中 reset_config() 后取到新的默认值
    from ..config import get_config

    return get_config().quality.as_mapping()


class FitPolicy(str, Enum):
    """尺寸调整策略"""

    COVER = "cover"  # 覆盖目标框，裁掉溢出部分
    INSIDE = "inside"  # 缩放到目标框内，不放大


class TransformConfig(BaseModel):
    """批次级转换配置"""

    quality_by_format: dict[str, int] = Field(
        default_factory=default_qualities, description="各格式的质量值"
    )
    resize_width: int | None = Field(None, gt=0, description="目标宽度")
    resize_height: int | None = Field(None, gt=0, description="目标高度")
    crop_fit: bool = Field(False, description="True 为 cover，False 为 inside")
    keep_transparency: bool = Field(False, description="保留透明通道")
    target_formats: list[str] = Field(
        default_factory=list, description="按顺序输出的目标格式，允许重复"
    )

    @field_validator("quality_by_format")
    @classmethod
    def validate_quality(cls, v: dict[str, int]) -> dict[str, int]:
        for name, quality in v.items():
            if not QualityLimits.MIN_QUALITY <= quality <= QualityLimits.MAX_QUALITY:
                raise ValueError(f"{name} 质量值必须在 0-100 之间，得到: {quality}")
        return {get_format_alias(name): quality for name, quality in v.items()}

    @field_validator("target_formats")
    @classmethod
    def normalize_formats(cls, v: list[str]) -> list[str]:
        # 只做小写和去空白，不去重
        return [name.strip().lower() for name in v]

    @property
    def should_resize(self) -> bool:
        """是否需要调整尺寸"""
        return self.resize_width is not None or self.resize_height is not None

    @property
    def fit_policy(self) -> FitPolicy:
        return FitPolicy.COVER if self.crop_fit else FitPolicy.INSIDE

    def quality_for(self, format_name: str) -> int:
        """获取某个格式的质量值（jpg 与 jpeg 共用）"""
        standard = get_format_alias(format_name)
        if standard in self.quality_by_format:
            return self.quality_by_format[standard]
        return default_qualities()[standard]
