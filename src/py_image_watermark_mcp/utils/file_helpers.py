"""文件工具模块。

从磁盘收集输入图片并读取为原始字节。
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from ..models.assets import RawImage
from ..models.constants import ImageFormats
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = False,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件，按路径排序

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"
    supported_extensions = ImageFormats.get_supported_extensions()

    for file_path in sorted(directory.glob(pattern)):
        if (
            file_path.is_file()
            and file_path.suffix.lower() in supported_extensions
            and not any(exclude_dir in file_path.parts for exclude_dir in exclude_dirs)
        ):
            yield file_path


def expand_input_paths(paths: Iterable[str | Path], recursive: bool = False) -> list[Path]:
    """展开输入路径：文件保持原顺序，目录替换为其中的图像文件

    Raises:
        FileNotFoundError: 路径不存在
    """
    expanded: list[Path] = []
    for path in map(Path, paths):
        if path.is_dir():
            expanded.extend(find_image_files(path, recursive=recursive))
        elif path.is_file():
            expanded.append(path)
        else:
            raise FileNotFoundError(2, MessageFormatter.file_not_found(path), str(path))
    return expanded


def read_raw_images(paths: Iterable[str | Path], recursive: bool = False) -> list[RawImage]:
    """读取输入图片为原始字节，顺序与输入一致"""
    return [RawImage.from_path(path) for path in expand_input_paths(paths, recursive)]
