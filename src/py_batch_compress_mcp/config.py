"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持以及存储目录初始化。
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class QualityDefaults:
    """各输出格式的默认质量"""

    JPEG_QUALITY: int = 75
    PNG_QUALITY: int = 80
    WEBP_QUALITY: int = 75
    AVIF_QUALITY: int = 50

    # PNG 始终使用最大无损压缩努力
    PNG_COMPRESS_LEVEL: int = 9

    def as_mapping(self) -> dict[str, int]:
        """按格式名返回默认质量映射"""
        return {
            "jpeg": self.JPEG_QUALITY,
            "png": self.PNG_QUALITY,
            "webp": self.WEBP_QUALITY,
            "avif": self.AVIF_QUALITY,
        }


@dataclass(frozen=True)
class StorageDefaults:
    """存储相关的默认配置"""

    STORAGE_ROOT: str = "."
    STAGING_DIR: str = "uploads"
    ARTIFACT_DIR: str = "compressed"
    LOG_DIR: str = "logs"

    # 交付模式: inline（base64 内联）或 handle（落盘并返回定位符）
    DELIVERY_MODE: str = "inline"
    PUBLIC_BASE_URL: str = "/compressed"


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 并发设置，1 表示严格串行
    MAX_WORKERS: int = 4

    # 只有字段名以此前缀开头的上传部分才视为图片
    IMAGE_FIELD_PREFIX: str = "images"


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_NAME: str = "py_batch_compress.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    DELIVERY_MODES = ("inline", "handle")

    def __init__(self):
        self.quality = QualityDefaults()
        self.storage = StorageDefaults()
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 质量配置
        for env_name, field in (
            ("PIC_JPEG_QUALITY", "JPEG_QUALITY"),
            ("PIC_PNG_QUALITY", "PNG_QUALITY"),
            ("PIC_WEBP_QUALITY", "WEBP_QUALITY"),
            ("PIC_AVIF_QUALITY", "AVIF_QUALITY"),
        ):
            if value := os.getenv(env_name):
                object.__setattr__(self.quality, field, int(value))

        # 存储配置
        if storage_root := os.getenv("PIC_STORAGE_ROOT"):
            object.__setattr__(self.storage, "STORAGE_ROOT", storage_root)

        if delivery_mode := os.getenv("PIC_DELIVERY_MODE"):
            mode = delivery_mode.strip().lower()
            if mode not in self.DELIVERY_MODES:
                raise ValueError(
                    f"PIC_DELIVERY_MODE 必须是 {self.DELIVERY_MODES} 之一，得到: {delivery_mode}"
                )
            object.__setattr__(self.storage, "DELIVERY_MODE", mode)

        if base_url := os.getenv("PIC_PUBLIC_BASE_URL"):
            object.__setattr__(self.storage, "PUBLIC_BASE_URL", base_url.rstrip("/"))

        # 并发配置
        if max_workers := os.getenv("PIC_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        # 日志配置
        if log_level := os.getenv("PIC_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PIC_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )

    @property
    def storage_root(self) -> Path:
        return Path(self.storage.STORAGE_ROOT)

    @property
    def staging_dir(self) -> Path:
        """上传文件暂存目录"""
        return self.storage_root / self.storage.STAGING_DIR

    @property
    def artifact_dir(self) -> Path:
        """handle 模式下的持久化产物目录"""
        return self.storage_root / self.storage.ARTIFACT_DIR

    @property
    def log_dir(self) -> Path:
        return self.storage_root / self.storage.LOG_DIR

    def ensure_storage_dirs(self) -> None:
        """创建暂存、产物和日志目录（幂等，启动时调用一次）"""
        for directory in (self.staging_dir, self.artifact_dir, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
