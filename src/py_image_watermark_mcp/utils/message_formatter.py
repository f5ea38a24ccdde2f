"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, target: str | Path | None, error: Exception) -> str:
        """格式化通用错误消息"""
        if target is None:
            return f"{operation}失败: {error}"
        return f"{operation}失败 [{target}]: {error}"

    @staticmethod
    def entry_written(file_name: str, size: str, quality: float | None) -> str:
        """归档条目写入消息"""
        if quality is None:
            return f"已写入 {file_name} ({size}, 无损)"
        return f"已写入 {file_name} ({size}, 质量 {quality:.2f})"

    @staticmethod
    def fallback_encode(file_name: str, size: str, quality: float) -> str:
        """超出大小上限时的二次编码消息"""
        return f"{file_name} 编码结果 {size} 超出上限，以质量 {quality:.2f} 重新编码"

