"""批量导出模块。

逐图合成并按输入顺序写入归档。每张图片是独立的工作单元
（解码 → 绘制 → 编码），可以并发执行；任一图片失败则整个批次中止，
不会生成部分归档。
"""

import asyncio
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..config import get_config
from ..core.compositor import composite
from ..core.decoder import load_logo, load_source_image
from ..exceptions import ErrorHandler, ExportCancelledError, InputError
from ..models.assets import EncodedAsset, LogoAsset, RawImage, SourceImage
from ..models.export_result import ExportArchive
from ..models.watermark_config import WatermarkConfig
from ..utils.file_helpers import read_raw_images
from ..utils.logging_helpers import get_logger
from .archive import ArchiveWriter
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()

ImageInput = SourceImage | RawImage
LogoInput = LogoAsset | RawImage


@dataclass(frozen=True)
class WatermarkTask:
    """单张图片的工作单元，logo 与配置在所有任务间只读共享"""

    image: ImageInput
    logo: LogoAsset | None
    config: WatermarkConfig


def process_task(task: WatermarkTask) -> EncodedAsset:
    """执行单个工作单元：需要时先解码，再合成并编码"""
    source = task.image
    if isinstance(source, RawImage):
        source = load_source_image(source)
    return composite(source, task.logo, task.config)


class BatchExporter:
    """批量导出器

    把一组图片加上同一个 logo 并打包成一个归档。
    """

    def __init__(
        self,
        max_workers: int | None = None,
        executor_type: str | None = None,
        archive_name: str | None = None,
    ):
        """初始化批量导出器

        Args:
            max_workers: 最大并发数，默认取全局配置
            executor_type: 执行器类型 ('thread'/'process')，默认取全局配置
            archive_name: 归档文件名，默认 images_with_logo.zip
        """
        processing = get_config().processing
        self.executor = ConcurrentExecutor(
            max_workers=max_workers or processing.MAX_WORKERS,
            executor_type=executor_type or processing.EXECUTOR_TYPE,
        )
        self.archive_name = archive_name

    def export(
        self,
        images: Sequence[ImageInput],
        logo: LogoInput | None,
        config: WatermarkConfig,
        require_logo: bool = True,
        cancel_event: threading.Event | None = None,
    ) -> ExportArchive:
        """导出归档

        Args:
            images: 原图（已解码或原始字节），顺序即归档条目顺序
            logo: logo，可为 None（仅当 ``require_logo`` 为假）
            config: 水印配置
            require_logo: 是否必须提供 logo
            cancel_event: 取消信号

        Returns:
            ExportArchive: 完整的归档

        Raises:
            InputError: 没有图片，或需要 logo 时未提供
            DecodeError: 某张图片或 logo 无法解码
            EncodeError: 某张图片合成或编码失败
            ExportCancelledError: 导出被取消
        """
        self._check_preconditions(images, logo, require_logo)

        logo_asset = load_logo(logo) if isinstance(logo, RawImage) else logo
        tasks = [WatermarkTask(image, logo_asset, config) for image in images]
        logger.info(f"开始导出 {len(tasks)} 张图片")

        with ArchiveWriter(self.archive_name) as writer:
            try:
                for asset in self.executor.iter_ordered(
                    tasks, process_task, cancel_event
                ):
                    writer.add(asset)

                if cancel_event is not None and cancel_event.is_set():
                    raise ExportCancelledError("导出已取消")
            except Exception as e:
                level = "warning" if isinstance(e, ExportCancelledError) else "error"
                ErrorHandler.log_error("批量导出", getattr(e, "file_name", None), e, level)
                raise

            archive = writer.close()

        logger.info(archive.get_summary())
        return archive

    async def export_async(
        self,
        images: Sequence[ImageInput],
        logo: LogoInput | None,
        config: WatermarkConfig,
        require_logo: bool = True,
    ) -> ExportArchive:
        """在工作线程中导出；取消等待中的任务会通知导出停止"""
        cancel_event = threading.Event()
        try:
            return await asyncio.to_thread(
                self.export, images, logo, config, require_logo, cancel_event
            )
        except asyncio.CancelledError:
            cancel_event.set()
            raise

    def export_files(
        self,
        input_paths: Sequence[str | Path],
        logo_path: str | Path | None,
        config: WatermarkConfig,
        require_logo: bool = True,
        recursive: bool = False,
    ) -> ExportArchive:
        """从磁盘读取图片和 logo 后导出

        目录会展开为其中的图像文件。
        """
        if require_logo and logo_path is None:
            raise InputError("未选择 logo")
        images = read_raw_images(input_paths, recursive=recursive)
        logo = RawImage.from_path(logo_path) if logo_path is not None else None
        return self.export(images, logo, config, require_logo=require_logo)

    def export_to(
        self,
        input_paths: Sequence[str | Path],
        logo_path: str | Path | None,
        output_path: str | Path,
        config: WatermarkConfig,
        require_logo: bool = True,
        recursive: bool = False,
    ) -> tuple[ExportArchive, Path]:
        """从磁盘导出并保存归档

        只有整个批次成功后才会写出文件。

        Returns:
            tuple: (归档, 实际保存路径)
        """
        archive = self.export_files(
            input_paths, logo_path, config, require_logo=require_logo, recursive=recursive
        )
        saved_path = archive.save(output_path)
        logger.info(f"归档已保存: {saved_path}")
        return archive, saved_path

    def _check_preconditions(
        self,
        images: Sequence[ImageInput],
        logo: LogoInput | None,
        require_logo: bool,
    ) -> None:
        """开始任何处理前检查输入"""
        if not images:
            raise InputError("没有选择任何图片")
        if require_logo and logo is None:
            raise InputError("未选择 logo")
