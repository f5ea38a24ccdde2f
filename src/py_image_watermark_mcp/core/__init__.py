"""核心模块包。

几何解析、颜色解析、解码、合成与编码策略。
"""

from .colors import format_rgba, parse_hex_color
from .compositor import composite, render
from .decoder import (
    load_logo,
    load_logo_async,
    load_source_image,
    load_source_image_async,
)
from .encoding import (
    encode_adaptive,
    encode_lossless,
    encode_preserving,
    select_quality,
)
from .geometry import resolve_geometry


__all__ = [
    "composite",
    "encode_adaptive",
    "encode_lossless",
    "encode_preserving",
    "format_rgba",
    "load_logo",
    "load_logo_async",
    "load_source_image",
    "load_source_image_async",
    "parse_hex_color",
    "render",
    "resolve_geometry",
    "select_quality",
]
