"""单张图片转换流水线。

解码一次，共享的几何与色彩变换只做一次，然后按目标格式逐个编码。
任何一步失败都会终止该图片剩余的编码，整张图片记为失败。
"""

from pathlib import Path

from PIL import Image, ImageOps

from ..exceptions import ImagePipelineError, handle_image_errors
from ..models.batch_result import BatchResult, ImageSuccess, OutputVariant
from ..models.constants import ImageFormats
from ..models.image_input import ImageInput
from ..models.transform_config import FitPolicy, TransformConfig
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .formats import FormatProcessor, flatten, has_alpha
from .sink import OutputSink


logger = get_logger()


@handle_image_errors("解码")
def decode_image(path: Path) -> Image.Image:
    """读取并完整解码源图"""
    with Image.open(path) as src:
        src.load()
        # 处理EXIF旋转，输出不保留方向信息
        img = ImageOps.exif_transpose(src)

    # 调色板图像先展开，避免缩放时退化为最近邻采样
    if img.mode == "P":
        img = img.convert("RGBA" if has_alpha(img) else "RGB")
    return img


def compute_inside_size(
    size: tuple[int, int], width: int | None, height: int | None
) -> tuple[int, int]:
    """inside 策略：等比缩放到目标框内，不放大"""
    current_width, current_height = size
    ratios = []
    if width is not None:
        ratios.append(width / current_width)
    if height is not None:
        ratios.append(height / current_height)

    ratio = min(ratios)
    if ratio >= 1:
        return size

    return (
        max(1, round(current_width * ratio)),
        max(1, round(current_height * ratio)),
    )


def compute_cover_size(
    size: tuple[int, int], width: int | None, height: int | None
) -> tuple[int, int]:
    """cover 策略只给出一个边时：该边对齐目标，另一边按宽高比推算"""
    current_width, current_height = size
    if width is not None and height is not None:
        return width, height
    if width is not None:
        return width, max(1, round(current_height * width / current_width))
    if height is not None:
        return max(1, round(current_width * height / current_height)), height
    return size


@handle_image_errors("尺寸调整")
def resize_image(img: Image.Image, config: TransformConfig) -> Image.Image:
    """按 fit 策略调整尺寸，未设置任何目标边时原样返回"""
    if not config.should_resize:
        return img

    width, height = config.resize_width, config.resize_height

    if config.fit_policy is FitPolicy.COVER:
        if width is not None and height is not None:
            # 覆盖整个目标框后居中裁剪为精确尺寸
            return ImageOps.fit(img, (width, height), Image.Resampling.LANCZOS)
        new_size = compute_cover_size(img.size, width, height)
    else:
        new_size = compute_inside_size(img.size, width, height)

    if new_size == img.size:
        return img
    return img.resize(new_size, Image.Resampling.LANCZOS)


@handle_image_errors("透明度处理")
def apply_transparency(img: Image.Image, config: TransformConfig) -> Image.Image:
    """不保留透明度时合成到白色背景上"""
    if config.keep_transparency:
        return img
    return flatten(img)


class TransformPipeline:
    """单张图片转换流水线

    每个批次创建一个实例，所有图片共享同一份配置和交付端。
    """

    def __init__(
        self,
        config: TransformConfig,
        sink: OutputSink,
        format_processor: FormatProcessor | None = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.format_processor = format_processor or FormatProcessor()

    def plan_formats(self, image: ImageInput) -> list[str]:
        """确定要编码的格式列表

        未指定目标格式时只编码一次：.png 源编码为 png，其余编码为 jpeg。
        """
        if self.config.target_formats:
            return list(self.config.target_formats)
        if image.extension in ImageFormats.FALLBACK_LOSSLESS_EXTENSIONS:
            return ["png"]
        return [ImageFormats.FALLBACK_DEFAULT]

    def run(self, image: ImageInput) -> ImageSuccess:
        """处理一张图片

        Raises:
            ImagePipelineError: 任一阶段失败
        """
        img = decode_image(image.path)
        img = resize_image(img, self.config)
        img = apply_transparency(img, self.config)

        payloads = [
            (format_name, self._encode(img, format_name))
            for format_name in self.plan_formats(image)
        ]

        outputs = self._emit_all(image, payloads)
        for variant in outputs:
            logger.debug(
                MessageFormatter.variant_summary(
                    image.original_name,
                    variant.format,
                    BatchResult.format_size(image.original_size),
                    BatchResult.format_size(variant.compressed_size),
                    variant.ratio,
                )
            )

        return ImageSuccess(
            original_name=image.original_name,
            original_size=image.original_size,
            outputs=outputs,
        )

    @handle_image_errors("编码")
    def _encode(self, img: Image.Image, format_name: str) -> bytes:
        pillow_format = self.format_processor.resolve(format_name)
        quality = self.config.quality_for(format_name)
        return self.format_processor.encode(img, pillow_format, quality)

    def _emit_all(
        self, image: ImageInput, payloads: list[tuple[str, bytes]]
    ) -> list[OutputVariant]:
        """交付全部变体，中途失败时撤销已交付的部分"""
        outputs: list[OutputVariant] = []
        try:
            for format_name, payload in payloads:
                outputs.append(self._emit(image, format_name, payload))
        except ImagePipelineError:
            for variant in outputs:
                self.sink.discard(variant)
            raise
        return outputs

    @handle_image_errors("输出")
    def _emit(self, image: ImageInput, format_name: str, payload: bytes) -> OutputVariant:
        return self.sink.emit(
            image.original_name, image.original_size, format_name, payload
        )


def process_image(
    image: ImageInput, config: TransformConfig, sink: OutputSink
) -> ImageSuccess:
    """处理单张图片的便捷入口"""
    return TransformPipeline(config, sink).run(image)
