"""编码策略模块。

根据图片尺寸和用户质量选择有损编码质量，超出大小上限时再编码一次；
也支持保持原格式、原质量的编码模式，以及无 logo 时的无损输出。
"""

from io import BytesIO
from pathlib import PurePath
from typing import Any

from humanize import naturalsize
from PIL import Image

from ..config import EncodingDefaults, get_config
from ..exceptions import EncodeError, handle_image_errors
from ..models.assets import EncodedAsset
from ..models.constants import (
    ImageFormats,
    get_extension,
    get_format_alias,
    get_mime_type,
    is_lossy_format,
)
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


def select_quality(
    width: int,
    height: int,
    base_quality: float,
    defaults: EncodingDefaults | None = None,
) -> float:
    """自适应质量选择

    1. 以用户质量为起点
    2. 最长边 > 2000：``max(0.4, q * 0.7)``；> 1000：``max(0.5, q * 0.8)``
    3. 结果钳制到 [0.3, 0.9]

    Args:
        width: 图片宽度
        height: 图片高度
        base_quality: 用户选择的基础质量 (0, 1]
        defaults: 阈值配置，默认使用全局配置

    Returns:
        float: 第一次编码使用的质量
    """
    defaults = defaults or get_config().encoding
    quality = base_quality
    longest = max(width, height)

    if longest > defaults.LARGE_DIMENSION:
        quality = max(defaults.LARGE_FLOOR, quality * defaults.LARGE_FACTOR)
    elif longest > defaults.MEDIUM_DIMENSION:
        quality = max(defaults.MEDIUM_FLOOR, quality * defaults.MEDIUM_FACTOR)

    return min(defaults.MAX_QUALITY, max(defaults.MIN_QUALITY, quality))


def to_pillow_quality(quality: float) -> int:
    """把 (0, 1] 的质量映射到 Pillow 的 1-100 整数"""
    return max(1, min(100, round(quality * 100)))


def replace_extension(file_name: str, format_name: str) -> str:
    """去掉原扩展名并追加目标格式的标准扩展名"""
    return f"{PurePath(file_name).stem}{get_extension(format_name)}"


def prepare_for_format(img: Image.Image, format_name: str) -> Image.Image:
    """为目标格式准备色彩模式

    不支持透明度的格式（如 JPEG）把透明区域铺在配置的背景色上。
    """
    if get_format_alias(format_name) in ImageFormats.TRANSPARENCY_FORMATS:
        return img

    if img.mode in ("RGBA", "LA", "P"):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, get_config().encoding.FLATTEN_BACKGROUND)
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def get_save_parameters(format_name: str, quality: float | None) -> dict[str, Any]:
    """获取保存参数

    只有有损格式接受质量参数，无损格式忽略质量。
    """
    format_name = get_format_alias(format_name)
    params: dict[str, Any] = {"format": format_name}

    match format_name:
        case "JPEG":
            # 未指定质量时沿用浏览器 toBlob 的默认值
            params["quality"] = to_pillow_quality(quality if quality is not None else 0.92)
            params["optimize"] = True
        case "PNG":
            params["compress_level"] = 6
        case "WEBP" | "AVIF" if quality is not None:
            params["quality"] = to_pillow_quality(quality)

    return params


@handle_image_errors("图像编码", EncodeError)
def encode_image(
    img: Image.Image, format_name: str, quality: float | None = None
) -> bytes:
    """把工作画布编码为字节

    Raises:
        EncodeError: 编码器不支持该格式或编码失败
    """
    format_name = get_format_alias(format_name)
    if format_name not in ImageFormats.get_writable_formats():
        raise EncodeError(f"不支持的输出格式: {format_name}")

    buffer = BytesIO()
    prepare_for_format(img, format_name).save(
        buffer, **get_save_parameters(format_name, quality)
    )
    data = buffer.getvalue()
    if not data:
        raise EncodeError(f"{format_name} 编码结果为空")
    return data


def encode_adaptive(
    img: Image.Image,
    file_name: str,
    base_quality: float,
    defaults: EncodingDefaults | None = None,
) -> EncodedAsset:
    """归一化编码：有损格式 + 自适应质量 + 超限二次编码

    第一次编码结果超过大小上限时，以 ``quality * 0.7`` 再编码一次并无条件
    采用，最多两次。

    Args:
        img: 工作画布
        file_name: 原图文件名
        base_quality: 用户选择的基础质量
        defaults: 编码配置，默认使用全局配置

    Returns:
        EncodedAsset: 编码结果
    """
    defaults = defaults or get_config().encoding
    format_name = defaults.LOSSY_FORMAT
    quality = select_quality(img.width, img.height, base_quality, defaults)

    data = _encode_named(img, file_name, format_name, quality)
    attempts = 1

    if len(data) > defaults.MAX_OUTPUT_BYTES:
        quality = quality * defaults.FALLBACK_FACTOR
        logger.info(
            MessageFormatter.fallback_encode(
                file_name, naturalsize(len(data), binary=True), quality
            )
        )
        data = _encode_named(img, file_name, format_name, quality)
        attempts = 2

    return EncodedAsset(
        file_name=replace_extension(file_name, format_name),
        data=data,
        mime_type=get_mime_type(format_name),
        format=format_name,
        quality_used=quality,
        encode_attempts=attempts,
        source_name=file_name,
    )


def encode_preserving(
    img: Image.Image,
    file_name: str,
    format_name: str | None,
    quality: float,
) -> EncodedAsset:
    """保持原格式编码：原容器、原文件名、用户质量原样使用，不做大小回退

    Raises:
        EncodeError: 原格式未知或无法写出
    """
    if not format_name:
        raise EncodeError("无法确定原始格式", file_name)

    format_name = get_format_alias(format_name)
    effective_quality = quality if is_lossy_format(format_name) else None
    data = _encode_named(img, file_name, format_name, effective_quality)

    return EncodedAsset(
        file_name=file_name,
        data=data,
        mime_type=get_mime_type(format_name),
        format=format_name,
        quality_used=effective_quality,
        encode_attempts=1,
        source_name=file_name,
    )


def encode_lossless(img: Image.Image, file_name: str) -> EncodedAsset:
    """无 logo 时的无损输出"""
    format_name = get_config().encoding.LOSSLESS_FORMAT
    data = _encode_named(img, file_name, format_name, None)

    return EncodedAsset(
        file_name=replace_extension(file_name, format_name),
        data=data,
        mime_type=get_mime_type(format_name),
        format=format_name,
        quality_used=None,
        encode_attempts=1,
        source_name=file_name,
    )


def _encode_named(
    img: Image.Image, file_name: str, format_name: str, quality: float | None
) -> bytes:
    try:
        return encode_image(img, format_name, quality)
    except EncodeError as e:
        if e.file_name is None:
            e.file_name = file_name
        raise
