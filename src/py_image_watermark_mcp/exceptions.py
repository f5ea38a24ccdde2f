"""水印处理异常模块。

定义统一的异常类和错误处理机制，包含异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class WatermarkError(Exception):
    """水印处理相关错误基类"""

    error_type = "general"

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.file_name = file_name

    def __str__(self) -> str:
        if self.file_name:
            return f"{self.message} [{self.file_name}]"
        return self.message


class ValidationError(WatermarkError):
    """参数验证错误"""

    error_type = "validation"


class InputError(WatermarkError):
    """输入错误：没有图片，或需要水印时未提供 logo"""

    error_type = "input"


class DecodeError(WatermarkError):
    """图像解码错误"""

    error_type = "decode"


class EncodeError(WatermarkError):
    """图像编码错误"""

    error_type = "encode"


class ExportCancelledError(WatermarkError):
    """导出被取消"""

    error_type = "cancelled"


def handle_image_errors(
    operation_name: str = "图像处理",
    error_cls: type[WatermarkError] = DecodeError,
):
    """统一的图像处理异常转换装饰器

    被装饰函数的第一个位置参数或 ``file_name`` 关键字参数若带有 ``name``
    属性，会作为出错文件名附加到异常上。

    Args:
        operation_name: 操作名称，用于日志记录
        error_cls: Pillow/系统异常转换成的目标异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            file_name = _guess_file_name(args, kwargs)
            try:
                return func(*args, **kwargs)
            except WatermarkError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_cls(f"无法识别的图像格式: {e}", file_name) from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise error_cls(f"图像像素过多，可能存在安全风险: {e}", file_name) from e
            except (OSError, ValueError, KeyError) as e:
                logger.error(f"{operation_name} - 处理失败: {e}")
                raise error_cls(f"{operation_name}失败: {e}", file_name) from e

        return wrapper

    return decorator


def _guess_file_name(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str | None:
    if isinstance(kwargs.get("file_name"), str):
        return kwargs["file_name"]
    if args:
        name = getattr(args[0], "name", None)
        if isinstance(name, str):
            return name
    return None


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误日志记录和工具响应构建。
    """

    @staticmethod
    def log_error(
        operation: str,
        target: str | None,
        error: Exception,
        level: str = "error",
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"批量导出"、"图像解码"等）
            target: 相关文件名
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, target, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def describe(error: Exception) -> dict[str, Any]:
        """把异常转换为可序列化的错误描述"""
        match error:
            case WatermarkError() as we:
                return {
                    "error_type": we.error_type,
                    "error": we.message,
                    "file_name": we.file_name,
                }
            case FileNotFoundError() as fnfe:
                return {
                    "error_type": "file",
                    "error": MessageFormatter.file_not_found(fnfe.filename),
                    "file_name": fnfe.filename,
                }
            case _:
                return {
                    "error_type": "processing",
                    "error": str(error),
                    "file_name": None,
                }
