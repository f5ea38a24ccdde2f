"""数据模型包。

定义水印处理相关的数据结构和模型。
"""

from .assets import EncodedAsset, LogoAsset, RawImage, SourceImage
from .constants import (
    ImageFormats,
    get_extension,
    get_format_alias,
    get_mime_type,
    is_lossy_format,
)
from .export_result import ArchiveEntry, ExportArchive
from .geometry import Geometry, Rect
from .watermark_config import Anchor, BackgroundPlate, WatermarkConfig


__all__ = [
    "Anchor",
    "ArchiveEntry",
    "BackgroundPlate",
    "EncodedAsset",
    "ExportArchive",
    "Geometry",
    "ImageFormats",
    "LogoAsset",
    "RawImage",
    "Rect",
    "SourceImage",
    "WatermarkConfig",
    "get_extension",
    "get_format_alias",
    "get_mime_type",
    "is_lossy_format",
]
