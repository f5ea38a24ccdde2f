"""图像合成模块。

把原图绘制到工作画布上，按解析出的几何依次绘制背景板和 logo，
再交给编码策略生成输出字节。原图和 logo 在整个过程中只读。
"""

from PIL import Image, ImageDraw

from ..exceptions import EncodeError, handle_image_errors
from ..models.assets import EncodedAsset, LogoAsset, SourceImage
from ..models.geometry import Rect
from ..models.watermark_config import WatermarkConfig
from ..utils.logging_helpers import get_logger
from .colors import format_rgba, is_valid_rgb, parse_hex_color, to_rgba_tuple
from .encoding import encode_adaptive, encode_lossless, encode_preserving
from .geometry import resolve_geometry


logger = get_logger()

# logo 缩放使用中等质量的平滑插值
LOGO_RESAMPLING = Image.Resampling.BILINEAR


@handle_image_errors("图像合成", EncodeError)
def render(
    source: SourceImage, logo: LogoAsset | None, config: WatermarkConfig
) -> Image.Image:
    """在工作画布上完成合成，返回 RGBA 画布

    Args:
        source: 原图
        logo: logo，为 None 时只复制原图
        config: 水印配置

    Returns:
        Image.Image: 与原图同尺寸的 RGBA 画布
    """
    # convert 总是返回新图像，原图像素不会被修改
    surface = source.pixels.convert("RGBA")
    if surface.size != (source.width, source.height):
        raise EncodeError(
            f"像素尺寸 {surface.size} 与声明尺寸 "
            f"({source.width}, {source.height}) 不一致",
            source.name,
        )

    if logo is None:
        return surface

    geometry = resolve_geometry(
        source.width, source.height, logo.width, logo.height, config
    )

    if geometry.plate_rect is not None:
        surface = _draw_plate(surface, geometry.plate_rect, config, source.name)

    return _draw_logo(surface, logo, geometry.logo_rect)


def composite(
    source: SourceImage, logo: LogoAsset | None, config: WatermarkConfig
) -> EncodedAsset:
    """合成并编码一张图片

    - 无 logo：无损 PNG 输出
    - 保持原格式模式：原容器、原质量
    - 默认：JPEG 归一化 + 自适应质量

    Raises:
        EncodeError: 合成或编码失败
    """
    surface = render(source, logo, config)

    if logo is None:
        return encode_lossless(surface, source.name)
    if config.preserve_format:
        return encode_preserving(surface, source.name, source.format, config.quality)
    return encode_adaptive(surface, source.name, config.quality)


def _draw_plate(
    surface: Image.Image, rect: Rect, config: WatermarkConfig, source_name: str
) -> Image.Image:
    """在矩形范围内按透明度混合背景色"""
    plate = config.background
    rgb = parse_hex_color(plate.color_hex)
    if not is_valid_rgb(rgb):
        # 无效颜色不中断导出，跳过背景板
        logger.warning(
            f"{source_name} 背景色 {plate.color_hex!r} 无效，"
            f"填充 {format_rgba(rgb, plate.opacity)} 被忽略"
        )
        return surface

    left, top, right, bottom = rect.to_box()
    left, top = max(left, 0), max(top, 0)
    right, bottom = min(right, surface.width), min(bottom, surface.height)
    if right <= left or bottom <= top:
        return surface

    overlay = Image.new("RGBA", surface.size, (0, 0, 0, 0))
    ImageDraw.Draw(overlay).rectangle(
        [left, top, right - 1, bottom - 1], fill=to_rgba_tuple(rgb, plate.opacity)
    )
    return Image.alpha_composite(surface, overlay)


def _draw_logo(surface: Image.Image, logo: LogoAsset, rect: Rect) -> Image.Image:
    """把 logo 缩放到目标矩形并叠加，只缩放画布内可见的部分"""
    left, top, right, bottom = rect.to_box()
    width, height = max(1, right - left), max(1, bottom - top)

    visible_left, visible_top = max(left, 0), max(top, 0)
    visible_right = min(left + width, surface.width)
    visible_bottom = min(top + height, surface.height)
    if visible_right <= visible_left or visible_bottom <= visible_top:
        return surface

    pixels = logo.pixels
    if pixels.mode != "RGBA":
        pixels = pixels.convert("RGBA")

    # 可见区域映射回 logo 像素坐标
    scale_x = pixels.width / width
    scale_y = pixels.height / height
    box = (
        (visible_left - left) * scale_x,
        (visible_top - top) * scale_y,
        (visible_right - left) * scale_x,
        (visible_bottom - top) * scale_y,
    )
    visible_size = (visible_right - visible_left, visible_bottom - visible_top)
    scaled = pixels.resize(visible_size, LOGO_RESAMPLING, box=box)

    surface.alpha_composite(scaled, dest=(visible_left, visible_top))
    return surface
