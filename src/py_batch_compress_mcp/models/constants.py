"""图像格式与请求字段常量定义。"""

from typing import Final


class ImageFormats:
    """可识别的目标格式"""

    # 用户格式名 -> Pillow 编码器名
    PILLOW_FORMATS: Final[dict[str, str]] = {
        "jpeg": "JPEG",
        "jpg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "avif": "AVIF",
    }

    # 别名 -> 质量设置所用的标准名
    ALIASES: Final[dict[str, str]] = {
        "jpg": "jpeg",
    }

    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "jpeg": ".jpg",
        "png": ".png",
        "webp": ".webp",
        "avif": ".avif",
    }

    # 未指定目标格式时的回退规则
    FALLBACK_LOSSLESS_EXTENSIONS: Final[set[str]] = {".png"}
    FALLBACK_DEFAULT: Final[str] = "jpeg"

    @classmethod
    def recognized(cls) -> list[str]:
        return list(cls.PILLOW_FORMATS)


class RequestFields:
    """请求字段名"""

    QUALITY: Final[dict[str, str]] = {
        "jpeg": "quality_jpeg",
        "png": "quality_png",
        "webp": "quality_webp",
        "avif": "quality_avif",
    }
    RESIZE_WIDTH: Final[str] = "resize_width"
    RESIZE_HEIGHT: Final[str] = "resize_height"
    CROP: Final[str] = "crop"
    KEEP_TRANSPARENCY: Final[str] = "keep_transparency"
    CONVERT_TO: Final[str] = "convert_to"


class QualityLimits:
    """质量取值范围"""

    MIN_QUALITY: Final[int] = 0
    MAX_QUALITY: Final[int] = 100


# 便捷访问函数
def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    lowered = format_str.lower()
    return ImageFormats.ALIASES.get(lowered, lowered)


def get_pillow_format(format_str: str) -> str | None:
    """获取 Pillow 编码器名，不可识别时返回 None"""
    return ImageFormats.PILLOW_FORMATS.get(format_str.lower())


def get_extension(format_str: str) -> str:
    """获取格式的首选扩展名"""
    standard_format = get_format_alias(format_str)
    return ImageFormats.PREFERRED_EXTENSIONS.get(standard_format, f".{standard_format}")
