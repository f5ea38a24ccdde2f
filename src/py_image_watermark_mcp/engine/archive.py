"""归档写入模块。

把编码结果按顺序写入内存中的 zip 归档。写入器是导出过程中唯一的可变
共享对象，所有追加操作通过锁串行化。
"""

import threading
import zipfile
from io import BytesIO
from itertools import count
from pathlib import PurePath

from ..config import get_config
from ..exceptions import WatermarkError
from ..models.assets import EncodedAsset
from ..models.export_result import ArchiveEntry, ExportArchive
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


class ArchiveWriter:
    """单次导出的 zip 写入器

    只在 ``close()`` 时生成最终归档；``discard()`` 丢弃已写入的内容。
    固定时间戳和文件属性，保证相同输入得到相同字节。
    """

    def __init__(self, file_name: str | None = None):
        processing = get_config().processing
        self.file_name = file_name or processing.ARCHIVE_NAME
        self._timestamp = processing.ARCHIVE_TIMESTAMP
        self._mime_type = processing.ARCHIVE_MIME_TYPE
        self._buffer = BytesIO()
        self._zip: zipfile.ZipFile | None = zipfile.ZipFile(
            self._buffer, mode="w", compression=zipfile.ZIP_DEFLATED
        )
        self._entries: list[ArchiveEntry] = []
        self._names: set[str] = set()
        self._lock = threading.Lock()

    @property
    def entries(self) -> list[ArchiveEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def is_open(self) -> bool:
        return self._zip is not None

    def add(self, asset: EncodedAsset) -> ArchiveEntry:
        """追加一个编码结果

        同名条目按输入顺序追加 ``_1``、``_2`` 后缀。

        Returns:
            ArchiveEntry: 写入的条目
        """
        with self._lock:
            if self._zip is None:
                raise WatermarkError("归档已关闭，无法继续写入", asset.file_name)

            name = self._unique_name(asset.file_name)
            info = zipfile.ZipInfo(name, date_time=self._timestamp)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            self._zip.writestr(info, asset.data)
            self._names.add(name)

            entry = ArchiveEntry(
                file_name=name,
                size=asset.size,
                mime_type=asset.mime_type,
                quality_used=asset.quality_used,
                source_name=asset.source_name,
            )
            self._entries.append(entry)

        logger.debug(
            MessageFormatter.entry_written(
                name, asset.get_size_human(), asset.quality_used
            )
        )
        return entry

    def close(self) -> ExportArchive:
        """结束写入并生成归档"""
        with self._lock:
            if self._zip is None:
                raise WatermarkError("归档已关闭", self.file_name)
            self._zip.close()
            self._zip = None
            return ExportArchive(
                file_name=self.file_name,
                mime_type=self._mime_type,
                data=self._buffer.getvalue(),
                entries=list(self._entries),
            )

    def discard(self) -> None:
        """丢弃已写入的内容，不生成归档"""
        with self._lock:
            if self._zip is not None:
                self._zip.close()
                self._zip = None
            self._buffer = BytesIO()
            self._entries.clear()
            self._names.clear()

    def _unique_name(self, name: str) -> str:
        if name not in self._names:
            return name

        path = PurePath(name)
        for counter in count(1):
            candidate = f"{path.stem}_{counter}{path.suffix}"
            if candidate not in self._names:
                logger.warning(f"归档中已存在 {name}，改名为 {candidate}")
                return candidate

        return name  # pragma: no cover

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # 异常退出时丢弃部分归档
        if exc_type is not None:
            self.discard()
