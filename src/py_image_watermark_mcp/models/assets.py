"""图像资源模型。

定义输入原始字节、解码后的原图与 logo，以及编码后的输出资源。
"""

from pathlib import Path

from humanize import naturalsize
from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .constants import ImageFormats


class RawImage(BaseModel):
    """输入边界：带文件名和声明 MIME 类型的原始字节"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="文件名")
    data: bytes = Field(repr=False, description="原始字节")
    mime_type: str | None = Field(None, description="声明的 MIME 类型")

    @classmethod
    def from_path(cls, path: str | Path) -> "RawImage":
        """从磁盘文件读取原始图像"""
        path = Path(path)
        format_name = Image.registered_extensions().get(path.suffix.lower())
        return cls(
            name=path.name,
            data=path.read_bytes(),
            mime_type=ImageFormats.get_mime_type(format_name) if format_name else None,
        )


class SourceImage(BaseModel):
    """解码后的原图，加载后只读"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="文件名")
    width: int = Field(gt=0, description="宽度（像素）")
    height: int = Field(gt=0, description="高度（像素）")
    format: str | None = Field(None, description="原始容器格式，如 PNG")
    mime_type: str | None = Field(None, description="原始 MIME 类型")
    pixels: Image.Image = Field(repr=False, description="像素数据")

    @classmethod
    def from_pil(
        cls, name: str, img: Image.Image, format: str | None = None
    ) -> "SourceImage":
        """由 Pillow 图像构建"""
        format = format or img.format
        return cls(
            name=name,
            width=img.width,
            height=img.height,
            format=format,
            mime_type=ImageFormats.get_mime_type(format) if format else None,
            pixels=img,
        )


class LogoAsset(BaseModel):
    """一次导出共享的 logo"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    width: int = Field(gt=0, description="宽度（像素）")
    height: int = Field(gt=0, description="高度（像素）")
    pixels: Image.Image = Field(repr=False, description="RGBA 像素数据")
    name: str | None = Field(None, description="文件名")

    @classmethod
    def from_pil(cls, img: Image.Image, name: str | None = None) -> "LogoAsset":
        """由 Pillow 图像构建，统一转换为 RGBA"""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(width=img.width, height=img.height, pixels=img, name=name)


class EncodedAsset(BaseModel):
    """单张图片的编码输出，创建后不再修改"""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="输出文件名")
    data: bytes = Field(repr=False, description="编码后的字节")
    mime_type: str = Field(description="输出 MIME 类型")
    format: str = Field(description="输出容器格式")
    quality_used: float | None = Field(None, description="最终使用的质量，无损为 None")
    encode_attempts: int = Field(1, ge=1, le=2, description="编码次数")
    source_name: str = Field(description="原图文件名")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size(self) -> int:
        """字节数"""
        return len(self.data)

    def get_size_human(self) -> str:
        """人类可读的大小"""
        return naturalsize(self.size, binary=True)
