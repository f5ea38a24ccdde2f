"""批量图片水印库。

基于 Pillow 的 logo 合成、自适应编码与 zip 打包。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "批量图片加 logo 并打包，支持自适应质量编码"

from .engine.batch import BatchExporter
from .models import (
    Anchor,
    BackgroundPlate,
    EncodedAsset,
    ExportArchive,
    LogoAsset,
    RawImage,
    SourceImage,
    WatermarkConfig,
)
from .watermarker import ImageWatermarker


__all__ = [
    "Anchor",
    "BackgroundPlate",
    "BatchExporter",
    "EncodedAsset",
    "ExportArchive",
    "ImageWatermarker",
    "LogoAsset",
    "RawImage",
    "SourceImage",
    "WatermarkConfig",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
