"""图像解码模块。

把原始字节解码为可绘制的原图或 logo。解码是显式的阶段：要么返回结果，
要么抛出 DecodeError；异步调用方可以 await 对应的 ``*_async`` 版本。
"""

import asyncio
from io import BytesIO

from PIL import Image, ImageOps

from ..exceptions import DecodeError, handle_image_errors
from ..models.assets import LogoAsset, RawImage, SourceImage
from ..models.constants import ImageFormats
from ..utils.logging_helpers import get_logger


logger = get_logger()


def _open_image(raw: RawImage) -> tuple[Image.Image, str | None]:
    """打开并完整加载图像，返回 (图像, 原始格式)"""
    if not raw.data:
        raise DecodeError("文件为空", raw.name)

    with Image.open(BytesIO(raw.data)) as img:
        # 多帧图像只取第一帧
        img.seek(0)
        img.load()
        format_name = img.format
        # 按 EXIF 方向信息摆正
        oriented = ImageOps.exif_transpose(img)

    declared = ImageFormats.format_from_mime_type(raw.mime_type)
    if declared and format_name and declared != format_name:
        logger.debug(f"{raw.name} 声明类型 {raw.mime_type} 与实际格式 {format_name} 不一致")

    return oriented, format_name or declared


@handle_image_errors("图像解码", DecodeError)
def load_source_image(raw: RawImage) -> SourceImage:
    """解码一张原图

    Args:
        raw: 原始字节

    Returns:
        SourceImage: 解码后的原图

    Raises:
        DecodeError: 字节无法解释为图像
    """
    img, format_name = _open_image(raw)
    logger.debug(f"解码 {raw.name}: {img.width}x{img.height} {format_name}")
    return SourceImage.from_pil(raw.name, img, format_name)


@handle_image_errors("logo 解码", DecodeError)
def load_logo(raw: RawImage) -> LogoAsset:
    """解码 logo，统一为 RGBA

    Raises:
        DecodeError: 字节无法解释为图像
    """
    img, _ = _open_image(raw)
    return LogoAsset.from_pil(img, name=raw.name)


async def load_source_image_async(raw: RawImage) -> SourceImage:
    """在工作线程中解码原图"""
    return await asyncio.to_thread(load_source_image, raw)


async def load_logo_async(raw: RawImage) -> LogoAsset:
    """在工作线程中解码 logo"""
    return await asyncio.to_thread(load_logo, raw)
