"""格式处理器模块。

为各目标格式准备色彩模式并生成 Pillow 保存参数。
"""

import logging
from io import BytesIO
from typing import Any

from PIL import Image, features

from ..config import get_config
from ..models.constants import ImageFormats, get_pillow_format
from ..utils.message_formatter import MessageFormatter


logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


def has_alpha(img: Image.Image) -> bool:
    """图片是否带透明信息"""
    if img.mode in ("RGBA", "LA", "PA", "RGBa", "La"):
        return True
    return "transparency" in img.info


def flatten(
    img: Image.Image, background: tuple[int, int, int] = WHITE
) -> Image.Image:
    """合成到不透明背景上并丢弃透明通道"""
    if not has_alpha(img):
        return img

    rgba = img.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, background)
    canvas.paste(rgba, mask=rgba.getchannel("A"))
    return canvas


class FormatProcessor:
    """格式处理器"""

    def __init__(self) -> None:
        self.avif_supported = features.check("avif")
        if not self.avif_supported:
            logger.debug("当前 Pillow 未启用 AVIF 编码")

    def resolve(self, format_name: str) -> str:
        """把用户格式名解析为 Pillow 编码器名

        Raises:
            UnsupportedFormatError: 格式不可识别或当前环境无法编码
        """
        from ..exceptions import UnsupportedFormatError

        pillow_format = get_pillow_format(format_name)
        if pillow_format is None:
            raise UnsupportedFormatError(
                MessageFormatter.unsupported_format(
                    format_name, ImageFormats.recognized()
                ),
                "编码",
            )
        if pillow_format == "AVIF" and not self.avif_supported:
            raise UnsupportedFormatError("当前环境的 Pillow 不支持 AVIF 编码", "编码")
        return pillow_format

    def prepare_for_format(self, img: Image.Image, pillow_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            pillow_format: Pillow 编码器名

        Returns:
            Image.Image: 处理后的图片对象
        """
        match pillow_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP" | "AVIF":
                return self._prepare_for_rgb_family(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，合成到白色背景后转换为RGB"""
        if has_alpha(img):
            return flatten(img)
        if img.mode in ("RGB", "L"):
            return img
        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG 支持多数模式，只转换 CMYK 等无法写入的模式

        32 位整数与浮点灰度图转为 16 位灰度（超出 0-65535 的值被截断）。
        """
        match img.mode:
            case "CMYK" | "YCbCr" | "LAB" | "HSV":
                return img.convert("RGB")
            case "F":
                return img.convert("I").convert("I;16")
            case "I":
                return img.convert("I;16")
            case _:
                return img

    def _prepare_for_rgb_family(self, img: Image.Image) -> Image.Image:
        """WebP/AVIF 只接受 RGB 和 RGBA"""
        if img.mode in ("RGB", "RGBA"):
            return img
        return img.convert("RGBA" if has_alpha(img) else "RGB")

    def encode(self, img: Image.Image, pillow_format: str, quality: int) -> bytes:
        """按 Pillow 编码器和质量编码为字节"""
        prepared = self.prepare_for_format(img, pillow_format)
        params = get_save_parameters(pillow_format, quality)

        buffer = BytesIO()
        prepared.save(buffer, format=pillow_format, **params)
        return buffer.getvalue()


def get_save_parameters(pillow_format: str, quality: int) -> dict[str, Any]:
    """获取保存参数"""
    match pillow_format:
        case "JPEG":
            return get_jpeg_params(quality)
        case "PNG":
            return get_png_params(quality)
        case "WEBP":
            return get_webp_params(quality)
        case "AVIF":
            return get_avif_params(quality)
        case _:
            return {}


def get_jpeg_params(quality: int) -> dict[str, Any]:
    """获取JPEG压缩参数

    - quality: 0-100，100 会禁用部分压缩算法
    - optimize: 额外处理以找到最优编码设置
    """
    return {
        "quality": quality,
        "optimize": True,
    }


def get_png_params(quality: int) -> dict[str, Any]:
    """获取PNG压缩参数

    PNG 是无损格式，质量值不影响输出，始终使用最大压缩级别。
    """
    logger.debug(f"PNG无损压缩，忽略质量={quality}，使用最佳压缩级别")
    return {
        "optimize": True,
        "compress_level": get_config().quality.PNG_COMPRESS_LEVEL,
    }


def get_webp_params(quality: int) -> dict[str, Any]:
    """获取WebP压缩参数

    - quality控制图像质量(0=最小,100=最大)
    - method：0=快速，6=最慢但最佳压缩
    """
    return {
        "quality": quality,
        "method": 6,
    }


def get_avif_params(quality: int) -> dict[str, Any]:
    """获取AVIF压缩参数"""
    return {
        "quality": quality,
        "speed": 6,
    }
