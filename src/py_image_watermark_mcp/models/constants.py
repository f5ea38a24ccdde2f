"""图像格式相关常量定义。

基于 Pillow 动态能力的格式、MIME 类型和扩展名映射，避免硬编码重复。
"""

from typing import Final

from PIL import Image


class ImageFormats:
    """基于 Pillow 的动态图像格式管理"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
        "TIF": "TIFF",
    }

    # Pillow 未提供的特殊 MIME 类型
    SPECIAL_MIME_TYPES: Final[dict[str, str]] = {
        "ICO": "image/x-icon",
        "PPM": "image/x-portable-pixmap",
    }

    # 首选扩展名（当 Pillow 有多个选择时）
    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "TIFF": ".tiff",
        "PNG": ".png",
        "WEBP": ".webp",
    }

    # 有损格式才接受质量参数
    LOSSY_FORMATS: Final[set[str]] = {"JPEG", "WEBP", "AVIF"}
    TRANSPARENCY_FORMATS: Final[set[str]] = {"PNG", "WEBP", "GIF", "TIFF", "AVIF", "ICO"}

    @classmethod
    def get_supported_extensions(cls) -> set[str]:
        """动态获取 Pillow 可识别的所有扩展名"""
        return set(Image.registered_extensions().keys())

    @classmethod
    def get_writable_formats(cls) -> set[str]:
        """动态获取 Pillow 可写出的格式"""
        Image.init()
        return {fmt.upper() for fmt in Image.SAVE}

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取格式对应的 MIME 类型，优先使用 Pillow 注册信息"""
        Image.init()
        format_upper = get_format_alias(format_name)

        if format_upper in cls.SPECIAL_MIME_TYPES:
            return cls.SPECIAL_MIME_TYPES[format_upper]

        return Image.MIME.get(format_upper) or f"image/{format_upper.lower()}"

    @classmethod
    def get_extension(cls, format_name: str) -> str:
        """获取格式对应的扩展名，优先使用首选扩展名"""
        format_upper = get_format_alias(format_name)

        if format_upper in cls.PREFERRED_EXTENSIONS:
            return cls.PREFERRED_EXTENSIONS[format_upper]

        for ext, fmt in Image.registered_extensions().items():
            if fmt and fmt.upper() == format_upper:
                return ext.lower()

        return f".{format_upper.lower()}"

    @classmethod
    def format_from_mime_type(cls, mime_type: str | None) -> str | None:
        """根据 MIME 类型反查 Pillow 格式名"""
        if not mime_type:
            return None
        Image.init()
        mime_lower = mime_type.strip().lower()
        for fmt, mime in {**Image.MIME, **cls.SPECIAL_MIME_TYPES}.items():
            if mime.lower() == mime_lower:
                return fmt.upper()
        if mime_lower.startswith("image/"):
            return get_format_alias(mime_lower.removeprefix("image/"))
        return None


def get_format_alias(format_name: str) -> str:
    """标准化格式名称"""
    upper = format_name.upper()
    return ImageFormats.ALIASES.get(upper, upper)


def get_mime_type(format_name: str) -> str:
    """获取格式的 MIME 类型"""
    return ImageFormats.get_mime_type(format_name)


def get_extension(format_name: str) -> str:
    """获取格式的扩展名"""
    return ImageFormats.get_extension(format_name)


def is_lossy_format(format_name: str) -> bool:
    """检查格式是否接受质量参数"""
    return get_format_alias(format_name) in ImageFormats.LOSSY_FORMATS
