"""测试配置文件。

提供测试所需的fixtures：合成的原图、logo 和原始字节。
"""

import random
import tempfile
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_watermark_mcp.models import LogoAsset, RawImage, SourceImage


def _encode(img: Image.Image, format: str) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def _noise_image(width: int, height: int, seed: int = 7) -> Image.Image:
    """生成可复现的噪声图，JPEG 压缩效果差，便于触发大小上限"""
    data = random.Random(seed).randbytes(width * height * 3)
    return Image.frombytes("RGB", (width, height), data)


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def noise_image() -> Callable[..., Image.Image]:
    """噪声图工厂"""
    return _noise_image


@pytest.fixture
def make_source() -> Callable[..., SourceImage]:
    """原图工厂：纯色或带色块的 RGB 图"""

    def factory(
        name: str = "photo.png",
        size: tuple[int, int] = (800, 600),
        color: tuple[int, int, int] = (255, 255, 255),
        format: str = "PNG",
    ) -> SourceImage:
        img = Image.new("RGB", size, color)
        draw = ImageDraw.Draw(img)
        for i in range(10):
            x, y = (i * 37) % size[0], (i * 23) % size[1]
            draw.rectangle([x, y, x + 5, y + 5], fill=(i * 20, 100, 200 - i * 10))
        return SourceImage.from_pil(name, img, format)

    return factory


@pytest.fixture
def make_raw() -> Callable[..., RawImage]:
    """原始字节工厂"""

    def factory(
        name: str = "photo.png",
        size: tuple[int, int] = (320, 240),
        color: tuple[int, int, int] = (30, 120, 200),
        format: str = "PNG",
    ) -> RawImage:
        img = Image.new("RGB", size, color)
        mime = Image.MIME.get(format, f"image/{format.lower()}")
        return RawImage(name=name, data=_encode(img, format), mime_type=mime)

    return factory


@pytest.fixture
def red_logo() -> LogoAsset:
    """200x100 不透明红色 logo"""
    return LogoAsset.from_pil(Image.new("RGBA", (200, 100), (255, 0, 0, 255)), "logo.png")


@pytest.fixture
def raw_logo() -> RawImage:
    """半透明 logo 的 PNG 字节"""
    img = Image.new("RGBA", (120, 60), (0, 0, 0, 0))
    ImageDraw.Draw(img).ellipse([0, 0, 119, 59], fill=(0, 0, 255, 200))
    return RawImage(name="logo.png", data=_encode(img, "PNG"), mime_type="image/png")


@pytest.fixture
def image_dir(temp_dir: Path) -> Path:
    """写入磁盘的输入图片目录"""
    images_dir = temp_dir / "images"
    images_dir.mkdir()
    Image.new("RGB", (640, 480), (200, 40, 40)).save(images_dir / "a_first.png")
    Image.new("RGB", (1200, 900), (40, 200, 40)).save(images_dir / "b_second.jpg")
    Image.new("RGB", (300, 300), (40, 40, 200)).save(images_dir / "c_third.webp")
    (images_dir / "notes.txt").write_text("不是图片")
    return images_dir


@pytest.fixture
def logo_file(temp_dir: Path) -> Path:
    """写入磁盘的 logo 文件"""
    path = temp_dir / "logo.png"
    Image.new("RGBA", (100, 50), (255, 255, 255, 180)).save(path)
    return path
