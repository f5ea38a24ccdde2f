"""图像水印器接口。

基于批量导出引擎的简洁用户接口：参数构建配置、读取文件、导出并保存归档。
"""

from pathlib import Path
from typing import Any

from .core.geometry import resolve_geometry
from .engine.batch import BatchExporter
from .engine.config import ConfigBuilder
from .models import ExportArchive, Geometry
from .utils.logging_helpers import get_logger


logger = get_logger()


class ImageWatermarker:
    """图像水印器

    把控制面的扁平参数转换为 ``WatermarkConfig``，再交给批量导出器。
    """

    def __init__(
        self,
        max_workers: int | None = None,
        executor_type: str | None = None,
    ):
        """初始化水印器

        Args:
            max_workers: 批量处理时的最大并发数
            executor_type: 执行器类型 ('thread'/'process')
        """
        self.config_builder = ConfigBuilder()
        self.exporter = BatchExporter(
            max_workers=max_workers, executor_type=executor_type
        )

        logger.debug("初始化图像水印器")

    def watermark_files(
        self,
        input_paths: list[str | Path],
        logo_path: str | Path | None,
        output_path: str | Path | None = None,
        require_logo: bool = True,
        recursive: bool = False,
        **config_kwargs: Any,
    ) -> tuple[ExportArchive, Path | None]:
        """给一组文件加水印并打包

        Args:
            input_paths: 输入图片或目录
            logo_path: logo 文件
            output_path: 归档保存位置（文件或目录），为 None 时不保存
            require_logo: 是否必须提供 logo
            recursive: 目录是否递归
            **config_kwargs: 透传给 ``ConfigBuilder.build`` 的配置参数

        Returns:
            tuple: (归档, 实际保存路径或 None)

        Examples:
            >>> watermarker = ImageWatermarker()
            >>> archive, saved = watermarker.watermark_files(
            ...     ["photos/"], "logo.png", "out/", anchor="bottom-right"
            ... )
            >>> print(archive.get_summary())
        """
        config = self.config_builder.build(**config_kwargs)

        if output_path is None:
            archive = self.exporter.export_files(
                input_paths,
                logo_path,
                config,
                require_logo=require_logo,
                recursive=recursive,
            )
            return archive, None

        return self.exporter.export_to(
            input_paths,
            logo_path,
            output_path,
            config,
            require_logo=require_logo,
            recursive=recursive,
        )

    def preview_geometry(
        self,
        source_width: int,
        source_height: int,
        logo_width: int,
        logo_height: int,
        **config_kwargs: Any,
    ) -> Geometry:
        """只计算几何，不做任何绘制"""
        config = self.config_builder.build(**config_kwargs)
        return resolve_geometry(
            source_width, source_height, logo_width, logo_height, config
        )
