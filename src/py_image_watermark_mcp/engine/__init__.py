"""批量导出引擎模块。

包含批量导出、有序并发执行、归档写入和配置构建。
"""

from .archive import ArchiveWriter
from .batch import BatchExporter
from .concurrent_executor import ConcurrentExecutor
from .config import ConfigBuilder


__all__ = [
    "ArchiveWriter",
    "BatchExporter",
    "ConcurrentExecutor",
    "ConfigBuilder",
]
