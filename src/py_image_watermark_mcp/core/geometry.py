"""几何解析模块。

把水印配置和两张图片的尺寸转换为 logo 与背景板的绝对像素矩形。
纯函数，不做任何边界钳制：超出画布的矩形是合法输出。
"""

import math

from ..models.geometry import Geometry, Rect
from ..models.watermark_config import WatermarkConfig


def resolve_geometry(
    source_width: float,
    source_height: float,
    logo_width: float,
    logo_height: float,
    config: WatermarkConfig,
) -> Geometry:
    """计算 logo 与背景板的位置和尺寸

    logo 宽度按原图宽度的百分比计算，高度按 logo 原始宽高比等比缩放。
    边距从锚点所在的两条边量起，水平、垂直两个方向各自独立处理。

    Args:
        source_width: 原图宽度
        source_height: 原图高度
        logo_width: logo 原始宽度
        logo_height: logo 原始高度
        config: 水印配置

    Returns:
        Geometry: logo 矩形与可选的背景板矩形
    """
    final_width = source_width * (config.logo_width_percent / 100)
    final_height = logo_height * _ratio(final_width, logo_width)

    x = config.margin_horizontal
    y = config.margin_vertical
    if config.anchor.is_right:
        x = source_width - (final_width + config.margin_horizontal)
    if config.anchor.is_bottom:
        y = source_height - (final_height + config.margin_vertical)

    logo_rect = Rect(x=x, y=y, w=final_width, h=final_height)

    plate_rect = None
    if config.background_enabled:
        plate = config.background
        plate_rect = Rect(
            x=x - plate.padding_horizontal,
            y=y - plate.padding_vertical,
            w=final_width + 2 * plate.padding_horizontal,
            h=final_height + 2 * plate.padding_vertical,
        )

    return Geometry(logo_rect=logo_rect, plate_rect=plate_rect)


def _ratio(numerator: float, denominator: float) -> float:
    # 零宽 logo 不抛异常：x/0 为带符号的无穷大，0/0 为 NaN
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator
