"""颜色解析模块。

把 ``#RRGGBB`` 十六进制颜色拆成三个字节通道。格式错误的分组得到 NaN，
调用方据此降级处理，而不是直接失败。
"""

import math


RGB = tuple[float, float, float]


def parse_hex_color(color_hex: str) -> RGB:
    """解析十六进制颜色

    按偏移 1-2、3-4、5-6 读取两位十六进制分组；没有前导 ``#`` 时从偏移 0
    开始读取。无法解析的分组返回 NaN。

    Args:
        color_hex: 颜色字符串，如 ``#00ff00``

    Returns:
        tuple: (r, g, b)，每个通道为 0-255 的数值或 NaN
    """
    start = 1 if color_hex.startswith("#") else 0
    return tuple(  # type: ignore[return-value]
        _parse_channel(color_hex[start + offset : start + offset + 2])
        for offset in (0, 2, 4)
    )


def _parse_channel(group: str) -> float:
    if len(group) != 2:
        return math.nan
    try:
        return float(int(group, 16))
    except ValueError:
        return math.nan


def is_valid_rgb(rgb: RGB) -> bool:
    """所有通道都是有效数值"""
    return not any(math.isnan(channel) for channel in rgb)


def format_rgba(rgb: RGB, opacity: float) -> str:
    """格式化为 ``rgba(r,g,b,a)``，无效通道输出为 NaN"""
    channels = ",".join("NaN" if math.isnan(c) else str(int(c)) for c in rgb)
    return f"rgba({channels},{opacity:g})"


def to_rgba_tuple(rgb: RGB, opacity: float) -> tuple[int, int, int, int]:
    """转换为 Pillow 可用的 RGBA 整数元组

    Raises:
        ValueError: 存在 NaN 通道
    """
    if not is_valid_rgb(rgb):
        raise ValueError(f"无效颜色: {format_rgba(rgb, opacity)}")
    alpha = round(max(0.0, min(1.0, opacity)) * 255)
    return int(rgb[0]), int(rgb[1]), int(rgb[2]), alpha
