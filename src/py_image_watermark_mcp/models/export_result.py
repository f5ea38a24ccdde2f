"""导出结果模型。

定义最终归档及其条目的数据结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, computed_field


class ArchiveEntry(BaseModel):
    """归档中的单个条目"""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="条目名称")
    size: int = Field(ge=0, description="未压缩字节数")
    mime_type: str = Field(description="条目 MIME 类型")
    quality_used: float | None = Field(None, description="编码质量")
    source_name: str = Field(description="原图文件名")


class ExportArchive(BaseModel):
    """一次导出生成的不可变归档"""

    model_config = ConfigDict(frozen=True)

    file_name: str = Field(description="下载文件名")
    mime_type: str = Field("application/zip", description="归档 MIME 类型")
    data: bytes = Field(repr=False, description="归档字节")
    entries: list[ArchiveEntry] = Field(description="条目，按输入顺序")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def size(self) -> int:
        return len(self.data)

    def get_entry_names(self) -> list[str]:
        return [entry.file_name for entry in self.entries]

    def get_total_entry_size(self) -> int:
        """所有条目的未压缩总大小"""
        return sum(entry.size for entry in self.entries)

    def save(self, target: str | Path) -> Path:
        """写出归档

        Args:
            target: 目标文件路径；若为已存在的目录，则写入 ``目录/file_name``

        Returns:
            Path: 实际写入的路径
        """
        target = Path(target)
        if target.is_dir():
            target = target / self.file_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.data)
        return target

    def get_summary(self) -> str:
        """导出摘要"""
        return (
            f"{self.file_name}: {len(self.entries)} 张图片, "
            f"{naturalsize(self.get_total_entry_size(), binary=True)} → "
            f"{naturalsize(self.size, binary=True)}"
        )
