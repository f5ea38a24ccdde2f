"""批量水印 MCP 服务器。

通过 stdio 暴露两个工具：批量加水印打包，以及只计算几何的预览。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .exceptions import ErrorHandler, WatermarkError
from .models import ExportArchive, Geometry
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter
from .watermarker import ImageWatermarker


# MCP 服务器响应类型定义
MCPWatermarkResponse = dict[str, Any]
MCPGeometryResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def from_exception(error: Exception) -> dict[str, Any]:
        """根据异常构建错误结果，附带出错的文件名"""
        described = ErrorHandler.describe(error)
        details = {"file_name": described["file_name"]} if described["file_name"] else None
        return MCPResponseBuilder.error(
            message=described["error"],
            error_type=described["error_type"],
            details=details,
        )

    @staticmethod
    def archive(archive: ExportArchive, saved_path: Path | None) -> dict[str, Any]:
        """构建导出成功结果"""
        return {
            "success": True,
            "archive_name": archive.file_name,
            "archive_path": str(saved_path) if saved_path else None,
            "archive_size": archive.size,
            "entry_count": len(archive.entries),
            "entries": [
                {
                    "file_name": entry.file_name,
                    "source_name": entry.source_name,
                    "size": entry.size,
                    "mime_type": entry.mime_type,
                    "quality_used": entry.quality_used,
                }
                for entry in archive.entries
            ],
            "summary": archive.get_summary(),
        }

    @staticmethod
    def geometry(geometry: Geometry) -> dict[str, Any]:
        """构建几何预览结果"""
        return {
            "success": True,
            "logo_rect": geometry.logo_rect.model_dump(),
            "plate_rect": geometry.plate_rect.model_dump()
            if geometry.plate_rect
            else None,
        }


configure_logging()
logger = get_logger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量图片水印服务")

# 全局水印器实例
watermarker = ImageWatermarker()


@mcp.tool()
def watermark_images(
    input_paths: list[str],
    logo_path: str | None,
    output_path: str,
    anchor: str = "top-left",
    margin_horizontal: float = 24,
    margin_vertical: float = 24,
    logo_width_percent: float = 24,
    quality: float = 0.8,
    background_enabled: bool = False,
    background_color: str = "#ffffff",
    background_opacity: float = 0.5,
    padding_horizontal: float = 8,
    padding_vertical: float = 8,
    preserve_format: bool = False,
    recursive: bool = False,
) -> MCPWatermarkResponse:
    """给一组图片加上同一个 logo，并打包为 images_with_logo.zip

    任一图片失败则整个批次失败，不会写出部分归档。

    Args:
        input_paths: 输入图片文件或目录，顺序即归档条目顺序
        logo_path: logo 图片文件
        output_path: 归档保存路径；为目录时保存为 目录/images_with_logo.zip
        anchor: 锚点角 top-left/top-right/bottom-left/bottom-right
        margin_horizontal: 水平边距（像素）
        margin_vertical: 垂直边距（像素）
        logo_width_percent: logo 宽度占原图宽度的百分比
        quality: 基础编码质量 (0, 1]
        background_enabled: 是否绘制 logo 背景板
        background_color: 背景板颜色 #RRGGBB
        background_opacity: 背景板不透明度 [0, 1]
        padding_horizontal: 背景板水平内边距
        padding_vertical: 背景板垂直内边距
        preserve_format: 保持原格式和原质量（不做 JPEG 归一化和大小回退）
        recursive: 目录是否递归

    Returns:
        dict: 归档信息与各条目的名称、大小、质量

    使用场景:
        # 右下角加 logo，白色半透明背景板
        watermark_images(["photos/"], "logo.png", "out/",
                         anchor="bottom-right", background_enabled=True)
    """
    try:
        archive, saved_path = watermarker.watermark_files(
            input_paths=input_paths,
            logo_path=logo_path,
            output_path=output_path,
            recursive=recursive,
            anchor=anchor,
            margin_horizontal=margin_horizontal,
            margin_vertical=margin_vertical,
            logo_width_percent=logo_width_percent,
            quality=quality,
            background_enabled=background_enabled,
            background_color=background_color,
            background_opacity=background_opacity,
            padding_horizontal=padding_horizontal,
            padding_vertical=padding_vertical,
            preserve_format=preserve_format,
        )
        return MCPResponseBuilder.archive(archive, saved_path)

    except (WatermarkError, FileNotFoundError) as e:
        return MCPResponseBuilder.from_exception(e)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("批量水印", output_path, e))
        return MCPResponseBuilder.error(
            MessageFormatter.operation_failed("批量水印", output_path, e),
            "processing",
            {"operation": "批量水印"},
        )


@mcp.tool()
def preview_geometry(
    source_width: int,
    source_height: int,
    logo_width: int,
    logo_height: int,
    anchor: str = "top-left",
    margin_horizontal: float = 24,
    margin_vertical: float = 24,
    logo_width_percent: float = 24,
    background_enabled: bool = False,
    padding_horizontal: float = 8,
    padding_vertical: float = 8,
) -> MCPGeometryResponse:
    """计算 logo 与背景板在原图上的像素矩形，不读写任何文件

    Returns:
        dict: logo_rect 与 plate_rect（未启用背景板时为 None）
    """
    try:
        geometry = watermarker.preview_geometry(
            source_width,
            source_height,
            logo_width,
            logo_height,
            anchor=anchor,
            margin_horizontal=margin_horizontal,
            margin_vertical=margin_vertical,
            logo_width_percent=logo_width_percent,
            background_enabled=background_enabled,
            padding_horizontal=padding_horizontal,
            padding_vertical=padding_vertical,
        )
        return MCPResponseBuilder.geometry(geometry)
    except WatermarkError as e:
        return MCPResponseBuilder.from_exception(e)


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动批量图片水印 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
