"""批量导出、归档写入与并发执行测试。"""

import asyncio
import threading
import time
import zipfile
from io import BytesIO

import pytest
from PIL import Image

from py_image_watermark_mcp.engine import batch as batch_module
from py_image_watermark_mcp.engine.archive import ArchiveWriter
from py_image_watermark_mcp.engine.batch import BatchExporter
from py_image_watermark_mcp.engine.concurrent_executor import ConcurrentExecutor
from py_image_watermark_mcp.engine.config import ConfigBuilder, build_config
from py_image_watermark_mcp.exceptions import (
    DecodeError,
    ExportCancelledError,
    InputError,
    ValidationError,
    WatermarkError,
)
from py_image_watermark_mcp.models import (
    Anchor,
    EncodedAsset,
    RawImage,
    WatermarkConfig,
)


def read_zip(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(BytesIO(data))


def make_asset(file_name: str, data: bytes = b"payload") -> EncodedAsset:
    return EncodedAsset(
        file_name=file_name,
        data=data,
        mime_type="image/jpeg",
        format="JPEG",
        quality_used=0.8,
        source_name=file_name,
    )


@pytest.fixture
def exporter() -> BatchExporter:
    return BatchExporter(max_workers=3)


class TestConfigBuilder:
    """配置构建测试"""

    def test_defaults(self):
        config = ConfigBuilder().build()

        assert config.anchor == Anchor.TOP_LEFT
        assert (config.margin_horizontal, config.margin_vertical) == (24, 24)
        assert config.logo_width_percent == 24
        assert config.quality == pytest.approx(0.8)
        assert not config.background_enabled
        assert config.background.color_hex == "#ffffff"
        assert config.background.opacity == pytest.approx(0.5)

    def test_string_anchor(self):
        assert build_config(anchor="bottom-left").anchor == Anchor.BOTTOM_LEFT

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"anchor": "center"},
            {"quality": 0},
            {"quality": 1.5},
            {"logo_width_percent": 0},
            {"margin_horizontal": -1},
            {"background_color": "#12345"},
            {"background_color": "green"},
            {"background_opacity": 1.2},
            {"padding_vertical": -3},
            {"margin_horizontal": float("inf")},
            {"logo_width_percent": float("inf")},
            {"padding_horizontal": float("inf")},
            {"background_opacity": float("nan")},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        """非法参数转换为统一的验证错误"""
        with pytest.raises(ValidationError):
            build_config(**kwargs)

    def test_error_message_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            build_config(quality=2)

        assert "quality" in str(exc_info.value)


class TestArchiveWriter:
    """归档写入测试"""

    def test_entries_in_append_order(self):
        writer = ArchiveWriter()
        for name in ["z.jpg", "a.jpg", "m.jpg"]:
            writer.add(make_asset(name))
        archive = writer.close()

        assert archive.file_name == "images_with_logo.zip"
        assert archive.mime_type == "application/zip"
        assert archive.get_entry_names() == ["z.jpg", "a.jpg", "m.jpg"]
        assert read_zip(archive.data).namelist() == ["z.jpg", "a.jpg", "m.jpg"]

    def test_duplicate_names_get_suffix(self):
        """同名条目按顺序追加 _1、_2"""
        writer = ArchiveWriter()
        for data in (b"one", b"two", b"three"):
            writer.add(make_asset("photo.jpg", data))
        archive = writer.close()

        zf = read_zip(archive.data)
        assert zf.namelist() == ["photo.jpg", "photo_1.jpg", "photo_2.jpg"]
        assert zf.read("photo_1.jpg") == b"two"
        assert archive.entries[2].source_name == "photo.jpg"

    def test_deterministic_bytes(self):
        def build() -> bytes:
            writer = ArchiveWriter("custom.zip")
            writer.add(make_asset("a.jpg", b"x" * 100))
            writer.add(make_asset("b.jpg", b"y" * 100))
            return writer.close().data

        assert build() == build()

    def test_add_after_close_fails(self):
        writer = ArchiveWriter()
        writer.close()

        assert not writer.is_open
        with pytest.raises(WatermarkError):
            writer.add(make_asset("late.jpg"))

    def test_context_manager_discards_on_error(self):
        """异常退出时丢弃已写入的内容"""
        with pytest.raises(RuntimeError):
            with ArchiveWriter() as writer:
                writer.add(make_asset("a.jpg"))
                raise RuntimeError("boom")

        assert not writer.is_open
        assert writer.entries == []

    def test_save_into_directory(self, temp_dir):
        writer = ArchiveWriter()
        writer.add(make_asset("a.jpg"))
        archive = writer.close()

        saved = archive.save(temp_dir)

        assert saved == temp_dir / "images_with_logo.zip"
        assert saved.read_bytes() == archive.data
        assert "1 张图片" in archive.get_summary()


class TestConcurrentExecutor:
    """有序并发执行测试"""

    def test_results_in_input_order(self):
        """完成顺序不同，交付顺序仍与输入一致"""
        delays = [0.05, 0.0, 0.03, 0.01, 0.0]

        def task(item):
            index, delay = item
            time.sleep(delay)
            return index

        executor = ConcurrentExecutor(max_workers=3)
        assert executor.execute_ordered(list(enumerate(delays)), task) == [0, 1, 2, 3, 4]

    def test_bounded_in_flight(self):
        """同时在途的任务数不超过 max_workers"""
        lock = threading.Lock()
        active = 0
        peak = 0

        def task(item):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return item

        ConcurrentExecutor(max_workers=2).execute_ordered(list(range(8)), task)

        assert peak <= 2

    def test_failure_propagates(self):
        def task(item):
            if item == 2:
                raise DecodeError("坏图", f"{item}.png")
            return item

        with pytest.raises(DecodeError) as exc_info:
            ConcurrentExecutor(max_workers=2).execute_ordered(list(range(5)), task)

        assert exc_info.value.file_name == "2.png"

    def test_cancel_before_start(self):
        event = threading.Event()
        event.set()

        with pytest.raises(ExportCancelledError):
            ConcurrentExecutor().execute_ordered([1, 2, 3], lambda x: x, event)

    def test_empty_items(self):
        assert ConcurrentExecutor().execute_ordered([], lambda x: x) == []

    @pytest.mark.parametrize(
        "kwargs", [{"max_workers": 0}, {"executor_type": "fiber"}]
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValidationError):
            ConcurrentExecutor(**kwargs)


class TestBatchExporter:
    """批量导出测试"""

    def test_entries_follow_input_order(self, exporter, make_raw, raw_logo):
        """条目顺序与输入一致，与完成顺序无关"""
        images = [
            make_raw("c.png", size=(1600, 1200)),
            make_raw("a.png", size=(40, 30)),
            make_raw("b.png", size=(400, 300)),
        ]

        archive = exporter.export(images, raw_logo, WatermarkConfig())

        assert archive.get_entry_names() == ["c.jpg", "a.jpg", "b.jpg"]
        zf = read_zip(archive.data)
        assert zf.namelist() == ["c.jpg", "a.jpg", "b.jpg"]
        with Image.open(BytesIO(zf.read("c.jpg"))) as decoded:
            assert decoded.format == "JPEG"
            assert decoded.size == (1600, 1200)

    def test_accepts_decoded_sources(self, exporter, make_source, red_logo):
        archive = exporter.export([make_source("x.png")], red_logo, WatermarkConfig())

        assert archive.get_entry_names() == ["x.jpg"]

    def test_same_inputs_same_archive(self, exporter, make_raw, raw_logo):
        images = [make_raw("one.png"), make_raw("two.jpg", format="JPEG")]
        config = build_config(anchor="bottom-right", background_enabled=True)

        first = exporter.export(images, raw_logo, config)
        second = exporter.export(images, raw_logo, config)

        assert first.data == second.data

    def test_duplicate_stems_disambiguated(self, exporter, make_raw, raw_logo):
        """不同扩展名的同名图片归一化后不会覆盖"""
        images = [make_raw("a.png"), make_raw("a.webp", format="WEBP")]

        archive = exporter.export(images, raw_logo, WatermarkConfig())

        assert archive.get_entry_names() == ["a.jpg", "a_1.jpg"]
        assert [e.source_name for e in archive.entries] == ["a.png", "a.webp"]

    def test_no_images_rejected(self, exporter, raw_logo):
        with pytest.raises(InputError):
            exporter.export([], raw_logo, WatermarkConfig())

    def test_missing_logo_rejected_before_processing(self, exporter, make_raw):
        """需要 logo 时未提供则不处理任何图片"""
        images = [make_raw(f"{i}.png") for i in range(3)]

        with pytest.raises(InputError):
            exporter.export(images, None, WatermarkConfig())

    def test_without_logo_when_not_required(self, exporter, make_raw):
        """允许无 logo 时输出无损 PNG"""
        archive = exporter.export(
            [make_raw("plain.jpg", format="JPEG")], None, WatermarkConfig(), require_logo=False
        )

        assert archive.get_entry_names() == ["plain.png"]
        assert archive.entries[0].quality_used is None

    def test_undecodable_image_aborts_batch(self, exporter, make_raw, raw_logo):
        """任一图片解码失败则整体失败，并报告出错的文件"""
        images = [
            make_raw("good.png"),
            RawImage(name="broken.png", data=b"not an image", mime_type="image/png"),
            make_raw("later.png"),
        ]

        with pytest.raises(DecodeError) as exc_info:
            exporter.export(images, raw_logo, WatermarkConfig())

        assert exc_info.value.file_name == "broken.png"

    def test_empty_file_reported(self, exporter, raw_logo):
        with pytest.raises(DecodeError) as exc_info:
            exporter.export([RawImage(name="empty.png", data=b"")], raw_logo, WatermarkConfig())

        assert exc_info.value.file_name == "empty.png"

    def test_undecodable_logo(self, exporter, make_raw):
        bad_logo = RawImage(name="logo.png", data=b"\x89PNG broken")

        with pytest.raises(DecodeError) as exc_info:
            exporter.export([make_raw()], bad_logo, WatermarkConfig())

        assert exc_info.value.file_name == "logo.png"

    def test_cancelled_export(self, exporter, make_raw, raw_logo):
        event = threading.Event()
        event.set()

        with pytest.raises(ExportCancelledError):
            exporter.export([make_raw()], raw_logo, WatermarkConfig(), cancel_event=event)

    def test_custom_archive_name(self, make_raw, raw_logo):
        exporter = BatchExporter(max_workers=1, archive_name="branded.zip")

        archive = exporter.export([make_raw()], raw_logo, WatermarkConfig())

        assert archive.file_name == "branded.zip"

    def test_export_async(self, exporter, make_raw, raw_logo):
        images = [make_raw("a.png"), make_raw("b.png")]

        archive = asyncio.run(exporter.export_async(images, raw_logo, WatermarkConfig()))

        assert archive.get_entry_names() == ["a.jpg", "b.jpg"]

    def test_preserve_format_keeps_names(self, exporter, make_raw, raw_logo):
        images = [make_raw("a.png"), make_raw("b.webp", format="WEBP")]

        archive = exporter.export(images, raw_logo, build_config(preserve_format=True))

        assert archive.get_entry_names() == ["a.png", "b.webp"]
        assert [e.mime_type for e in archive.entries] == ["image/png", "image/webp"]

    def test_export_to_saves_only_on_success(self, exporter, image_dir, logo_file, temp_dir):
        target = temp_dir / "out" / "result.zip"

        archive, saved = exporter.export_to([image_dir], logo_file, target, WatermarkConfig())

        assert saved == target
        assert target.read_bytes() == archive.data

    def test_cancel_mid_run_discards_written_entries(self, make_raw, raw_logo, monkeypatch):
        """首个条目写入后取消，已写入的条目被丢弃且不生成归档"""
        event = threading.Event()
        writers: list[ArchiveWriter] = []
        original_task = batch_module.process_task

        class RecordingWriter(ArchiveWriter):
            def __init__(self, *args, **kwargs):
                super().__init__(*args, **kwargs)
                writers.append(self)

        def cancelling_task(task):
            asset = original_task(task)
            event.set()
            return asset

        monkeypatch.setattr(batch_module, "ArchiveWriter", RecordingWriter)
        monkeypatch.setattr(batch_module, "process_task", cancelling_task)
        images = [make_raw("a.png"), make_raw("b.png"), make_raw("c.png")]

        with pytest.raises(ExportCancelledError):
            BatchExporter(max_workers=1).export(
                images, raw_logo, WatermarkConfig(), cancel_event=event
            )

        assert len(writers) == 1
        assert not writers[0].is_open
        assert writers[0].entries == []

    def test_cancelling_async_export_sets_event(self, exporter, make_raw, raw_logo, monkeypatch):
        """取消等待中的异步导出会通知工作线程停止"""
        started = threading.Event()
        captured: dict[str, threading.Event] = {}

        def blocking_export(images, logo, config, require_logo, cancel_event):
            captured["event"] = cancel_event
            started.set()
            cancel_event.wait(5)

        monkeypatch.setattr(exporter, "export", blocking_export)

        async def run_and_cancel():
            task = asyncio.create_task(
                exporter.export_async([make_raw()], raw_logo, WatermarkConfig())
            )
            await asyncio.to_thread(started.wait, 5)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run_and_cancel())

        assert captured["event"].is_set()

    def test_process_pool_export(self, make_raw, raw_logo):
        """进程池模式下任务与结果可以跨进程传递"""
        exporter = BatchExporter(max_workers=2, executor_type="process")
        images = [make_raw("a.png"), make_raw("b.png", size=(1200, 900))]

        archive = exporter.export(images, raw_logo, WatermarkConfig())

        assert archive.get_entry_names() == ["a.jpg", "b.jpg"]
        assert [e.quality_used for e in archive.entries] == pytest.approx([0.8, 0.64])
