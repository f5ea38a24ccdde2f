"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class EncodingDefaults:
    """编码相关的默认配置"""

    # 输出格式
    LOSSY_FORMAT: str = "JPEG"
    LOSSLESS_FORMAT: str = "PNG"
    FLATTEN_BACKGROUND: tuple[int, int, int] = (255, 255, 255)

    # 自适应质量 - 按最长边分档
    LARGE_DIMENSION: int = 2000
    LARGE_FACTOR: float = 0.7
    LARGE_FLOOR: float = 0.4
    MEDIUM_DIMENSION: int = 1000
    MEDIUM_FACTOR: float = 0.8
    MEDIUM_FLOOR: float = 0.5

    # 质量钳制区间
    MIN_QUALITY: float = 0.3
    MAX_QUALITY: float = 0.9

    # 大小上限与二次编码
    MAX_OUTPUT_BYTES: int = 2 * 1024 * 1024
    FALLBACK_FACTOR: float = 0.7


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 并发设置
    MAX_WORKERS: int = 4
    EXECUTOR_TYPE: str = "thread"

    # 归档设置
    ARCHIVE_NAME: str = "images_with_logo.zip"
    ARCHIVE_MIME_TYPE: str = "application/zip"
    # zip 不支持 1980 年以前的时间戳，固定时间保证输出可复现
    ARCHIVE_TIMESTAMP: tuple[int, int, int, int, int, int] = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.encoding = EncodingDefaults()
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if max_output := os.getenv("PIW_MAX_OUTPUT_BYTES"):
            object.__setattr__(self.encoding, "MAX_OUTPUT_BYTES", int(max_output))

        if max_workers := os.getenv("PIW_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        if executor_type := os.getenv("PIW_EXECUTOR"):
            object.__setattr__(
                self.processing, "EXECUTOR_TYPE", executor_type.strip().lower()
            )

        if log_level := os.getenv("PIW_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
