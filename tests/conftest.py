"""测试配置文件。

提供测试所需的fixtures和合成测试图片。
"""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw, features

from py_batch_compress_mcp import config as config_module
from py_batch_compress_mcp.config import AppConfig
from py_batch_compress_mcp.core.sink import InlineSink
from py_batch_compress_mcp.models.image_input import ImageInput, UploadedPart


requires_avif = pytest.mark.skipif(
    not features.check("avif"), reason="当前 Pillow 未启用 AVIF 编码"
)


def image_bytes(
    size: tuple[int, int] = (400, 200),
    mode: str = "RGB",
    format: str = "PNG",
    color=None,
) -> bytes:
    """生成带图案的测试图片字节"""
    if color is None:
        color = (0, 0, 0, 0) if mode == "RGBA" else "white"
    img = Image.new(mode, size, color=color)
    draw = ImageDraw.Draw(img)
    width, height = size
    for i in range(10):
        x, y = (i * width) // 10, (i * height) // 10
        fill = (i * 25 % 256, 100 + i * 15, 255 - i * 20)
        if mode == "RGBA":
            fill = (*fill, 255)
        draw.rectangle([x, y, x + width // 5, y + height // 5], fill=fill)

    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def noisy_image_bytes(size: tuple[int, int] = (128, 128)) -> bytes:
    """生成难以压缩的噪声 PNG"""
    img = Image.merge("RGB", [Image.effect_noise(size, 64) for _ in range(3)])
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def transparent_png_bytes(size: tuple[int, int] = (40, 40)) -> bytes:
    """左半透明、右半不透明红色的 PNG"""
    img = Image.new("RGBA", size, color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([size[0] // 2, 0, size[0], size[1]], fill=(255, 0, 0, 255))
    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


CORRUPT_BYTES = b"definitely not an image"


def make_part(
    filename: str, data: bytes, field_name: str = "images"
) -> UploadedPart:
    """构造上传部分"""
    return UploadedPart(field_name=field_name, filename=filename, data=data)


def stage_image(directory: Path, filename: str, data: bytes) -> ImageInput:
    """把字节写入目录并返回 ImageInput"""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"staged_{filename}"
    path.write_bytes(data)
    return ImageInput(original_name=filename, original_size=len(data), path=path)


def open_output(encoded: str) -> Image.Image:
    """解码内联输出"""
    import base64

    img = Image.open(BytesIO(base64.b64decode(encoded)))
    img.load()
    return img


@pytest.fixture
def app_config(tmp_path: Path, monkeypatch) -> AppConfig:
    """指向临时存储目录的内联模式配置"""
    monkeypatch.setenv("PIC_STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.delenv("PIC_DELIVERY_MODE", raising=False)
    fresh = AppConfig()
    monkeypatch.setattr(config_module, "config", fresh)
    return fresh


@pytest.fixture
def handle_config(tmp_path: Path, monkeypatch) -> AppConfig:
    """指向临时存储目录的 handle 模式配置"""
    monkeypatch.setenv("PIC_STORAGE_ROOT", str(tmp_path / "storage"))
    monkeypatch.setenv("PIC_DELIVERY_MODE", "handle")
    monkeypatch.setenv("PIC_PUBLIC_BASE_URL", "https://cdn.example.com/compressed/")
    fresh = AppConfig()
    monkeypatch.setattr(config_module, "config", fresh)
    return fresh


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "staging"
    directory.mkdir()
    return directory


@pytest.fixture
def inline_sink() -> InlineSink:
    return InlineSink()
