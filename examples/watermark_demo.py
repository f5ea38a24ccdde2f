#!/usr/bin/env python3
"""批量水印演示脚本。

展示 py_image_watermark_mcp 库的核心功能，包括：
- 几何预览（不读写文件）
- 目录批量加 logo 并打包
- 保持原格式模式
- 异步导出
"""

import asyncio
from pathlib import Path

from PIL import Image, ImageDraw

from py_image_watermark_mcp import (
    BatchExporter,
    ImageWatermarker,
    RawImage,
    WatermarkConfig,
)
from py_image_watermark_mcp.engine.config import build_config
from py_image_watermark_mcp.exceptions import WatermarkError


def get_output_dir(subdir: str = "") -> Path:
    """获取输出目录 - 使用项目的 tmp 目录"""
    project_root = Path(__file__).parent.parent
    output_dir = project_root / "tmp" / "examples"
    if subdir:
        output_dir = output_dir / subdir
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def create_sample_images() -> tuple[Path, Path]:
    """生成演示用的原图目录和 logo"""
    images_dir = get_output_dir("input")
    sizes = {"landscape.png": (2400, 1600), "portrait.jpg": (900, 1200), "square.webp": (600, 600)}

    for name, size in sizes.items():
        path = images_dir / name
        if path.exists():
            continue
        img = Image.new("RGB", size, (70, 130, 180))
        draw = ImageDraw.Draw(img)
        for i in range(0, size[0], 60):
            draw.line([(i, 0), (size[0] - i, size[1])], fill=(240, 200, 80), width=3)
        img.save(path)

    logo_path = get_output_dir() / "logo.png"
    if not logo_path.exists():
        logo = Image.new("RGBA", (300, 120), (0, 0, 0, 0))
        ImageDraw.Draw(logo).rounded_rectangle(
            [0, 0, 299, 119], radius=24, fill=(255, 255, 255, 220)
        )
        logo.save(logo_path)

    print(f"📁 素材目录: {images_dir}")
    return images_dir, logo_path


def demo_preview_geometry():
    """几何预览演示"""
    print("=== 几何预览演示 ===")

    geometry = ImageWatermarker().preview_geometry(
        800, 600, 200, 100,
        anchor="bottom-right",
        margin_horizontal=10,
        margin_vertical=20,
        logo_width_percent=25,
        background_enabled=True,
        padding_horizontal=5,
        padding_vertical=5,
    )
    print(f"logo 矩形: {geometry.logo_rect.model_dump()}")
    print(f"背景板矩形: {geometry.plate_rect.model_dump() if geometry.plate_rect else None}")


def demo_batch_export(images_dir: Path, logo_path: Path):
    """目录批量导出演示"""
    print("\n=== 批量导出演示 ===")

    archive, saved = ImageWatermarker().watermark_files(
        [images_dir],
        logo_path,
        get_output_dir("normalized"),
        anchor="bottom-right",
        background_enabled=True,
        background_color="#202020",
        background_opacity=0.4,
    )
    print(f"批量导出: {archive.get_summary()}")
    print(f"保存到: {saved}")
    for entry in archive.entries:
        quality = f"{entry.quality_used:.2f}" if entry.quality_used is not None else "无损"
        print(f"  {entry.source_name} → {entry.file_name} (质量 {quality})")


def demo_preserve_format(images_dir: Path, logo_path: Path):
    """保持原格式演示"""
    print("\n=== 保持原格式演示 ===")

    archive, _ = ImageWatermarker().watermark_files(
        [images_dir],
        logo_path,
        get_output_dir("preserved"),
        anchor="top-right",
        preserve_format=True,
    )
    print(f"条目: {', '.join(archive.get_entry_names())}")


def demo_async_export(images_dir: Path, logo_path: Path):
    """异步导出演示"""
    print("\n=== 异步导出演示 ===")

    images = [RawImage.from_path(path) for path in sorted(images_dir.iterdir())]
    logo = RawImage.from_path(logo_path)
    config: WatermarkConfig = build_config(anchor="top-left", logo_width_percent=15)

    archive = asyncio.run(BatchExporter(max_workers=2).export_async(images, logo, config))
    print(f"异步导出: {archive.get_summary()}")


def main():
    """主函数"""
    print("🖼️  批量水印演示")
    print("=" * 50)

    try:
        images_dir, logo_path = create_sample_images()
        demo_preview_geometry()
        demo_batch_export(images_dir, logo_path)
        demo_preserve_format(images_dir, logo_path)
        demo_async_export(images_dir, logo_path)

        print("\n✅ 所有演示完成！")

    except WatermarkError as e:
        print(f"\n❌ 演示过程中出现错误: {e}")
        raise


if __name__ == "__main__":
    main()
