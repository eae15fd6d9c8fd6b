"""参数解析模块。

把请求中未类型化的字段解析为 TransformConfig。解析从不失败：
任何格式错误的数值字段都会回退到默认值。
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from ..models.constants import QualityLimits, RequestFields
from ..models.transform_config import TransformConfig, default_qualities


logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

FieldValue = str | int | list[str] | None


def parse_int(value: Any) -> int | None:
    """解析前导整数，"80abc" 解析为 80，无法解析时返回 None"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, list):
        # 重复字段取第一个值
        return parse_int(value[0]) if value else None
    if value is None:
        return None

    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def is_truthy_flag(value: Any) -> bool:
    """只有字符串 "1" 或数字 1 视为真"""
    return value == "1" or value == 1


def split_formats(value: FieldValue) -> list[str]:
    """把 convert_to 统一为有序字符串列表"""
    if value is None:
        return []
    if isinstance(value, list):
        pieces = [str(item) for item in value]
    else:
        pieces = str(value).split(",")
    return [piece.strip() for piece in pieces if piece.strip()]


class ParameterResolver:
    """批次参数解析器

    每个批次调用一次，结果被该批次的所有图片共享。
    """

    def resolve(self, fields: Mapping[str, FieldValue]) -> TransformConfig:
        """解析请求字段

        Args:
            fields: 字段名到字符串/数组值的映射

        Returns:
            TransformConfig: 应用默认值后的配置
        """
        config = TransformConfig(
            quality_by_format=self._resolve_qualities(fields),
            resize_width=self._resolve_dimension(fields, RequestFields.RESIZE_WIDTH),
            resize_height=self._resolve_dimension(fields, RequestFields.RESIZE_HEIGHT),
            crop_fit=is_truthy_flag(fields.get(RequestFields.CROP)),
            keep_transparency=is_truthy_flag(
                fields.get(RequestFields.KEEP_TRANSPARENCY)
            ),
            target_formats=split_formats(fields.get(RequestFields.CONVERT_TO)),
        )
        logger.debug(f"解析后的转换配置: {config.model_dump()}")
        return config

    def _resolve_qualities(self, fields: Mapping[str, FieldValue]) -> dict[str, int]:
        qualities = default_qualities()
        for format_name, field_name in RequestFields.QUALITY.items():
            parsed = parse_int(fields.get(field_name))
            if parsed is None:
                continue
            if not QualityLimits.MIN_QUALITY <= parsed <= QualityLimits.MAX_QUALITY:
                logger.warning(f"{field_name}={parsed} 超出 0-100，使用默认值")
                continue
            qualities[format_name] = parsed
        return qualities

    def _resolve_dimension(
        self, fields: Mapping[str, FieldValue], field_name: str
    ) -> int | None:
        raw = fields.get(field_name)
        if raw is None or raw == "" or raw == []:
            return None

        parsed = parse_int(raw)
        if parsed is None or parsed <= 0:
            logger.warning(f"{field_name}={raw!r} 不是正整数，忽略该尺寸")
            return None
        return parsed


def resolve_parameters(fields: Mapping[str, FieldValue]) -> TransformConfig:
    """解析请求字段的便捷函数"""
    return ParameterResolver().resolve(fields)
